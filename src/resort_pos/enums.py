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

"""Enumerations for the booking engine.

This module defines the checkout states, payment methods, service types and
screen modes used by booking sessions.
"""

import enum


class CheckoutState(str, enum.Enum):
  IDLE = "idle"
  AWAITING_PAYMENT_CHOICE = "awaiting_payment_choice"
  AWAITING_PAYMENT_CONFIRMATION = "awaiting_payment_confirmation"
  COMMITTING = "committing"
  COMPLETED = "completed"
  FAILED = "failed"


class PaymentMethod(str, enum.Enum):
  """Payment methods offered at the counter.

  The value is the label recorded on the booking.
  """

  CASH = "Cash"
  PAY_LATER = "Pay Later"
  UPI = "UPI/QR"

  @property
  def requires_confirmation(self) -> bool:
    """Whether staff must confirm receipt before the booking is committed."""
    return self is PaymentMethod.UPI


class ServiceType(str, enum.Enum):
  GAMES = "Games"
  POOL = "Pool"
  MASSAGE = "Massage"
  COMBO = "Combo"
  BAKERY = "Bakery"
  BAR = "Bar"
  JUICE_BAR = "Juice"
  THEATER = "Theater"
  ROOMS = "Rooms"
  FUNCTION_HALL = "Function Hall"


class ScreenMode(str, enum.Enum):
  """Mutually exclusive screen modes; selling is only possible in NORMAL."""

  NORMAL = "normal"
  EDIT = "edit"
  DELETE = "delete"
