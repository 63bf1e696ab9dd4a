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

"""Booking session engine for resort front-desk selling screens."""

from .checkout_flow import CheckoutFlow
from .catalog_sync import CatalogSync
from .enums import CheckoutState
from .enums import PaymentMethod
from .enums import ScreenMode
from .enums import ServiceType
from .ledger import SelectionLedger
from .session import BookingSession
from .tax_engine import compute

__all__ = [
    "BookingSession",
    "CatalogSync",
    "CheckoutFlow",
    "CheckoutState",
    "PaymentMethod",
    "ScreenMode",
    "SelectionLedger",
    "ServiceType",
    "compute",
]
