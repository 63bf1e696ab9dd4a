#   Copyright 2026 Resort POS Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Constants shared across the booking engine."""

WALK_IN_CUSTOMER_NAME = "Walk-in"

MIN_CUSTOMER_QUERY_LENGTH = 2

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

DEFAULT_CURRENCY = "INR"
DEFAULT_PAYEE_VPA = "9361016097@naviaxis"
DEFAULT_PAYEE_NAME = "JamJam Resort"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_SYNC_INTERVAL_SECONDS = 5.0
DEFAULT_MIN_LOADING_SECONDS = 5.0
DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS = 1800.0
DEFAULT_MAX_SESSIONS = 64
SESSION_REAP_INTERVAL_SECONDS = 60.0

UPI_SCHEME = "upi://pay"
