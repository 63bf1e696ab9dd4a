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

"""Printable bills for completed bookings."""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

from .constants import DEFAULT_PAYEE_NAME
from .exceptions import InvalidArgumentError
from .models import BookingRecord
from .payment import format_amount

BILL_WIDTH = 42

_UNITS = (
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight",
    "Nine", "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen",
    "Sixteen", "Seventeen", "Eighteen", "Nineteen",
)
_TENS = (
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy",
    "Eighty", "Ninety",
)
# Indian numbering groups, largest first.
_SCALES = (
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
)


class ResortDetails(BaseModel):
  """Letterhead printed at the top of every bill."""

  model_config = ConfigDict(frozen=True)

  name: str = DEFAULT_PAYEE_NAME
  address: str = ""
  gstin: str = ""
  mobile: str = ""
  email: str = ""


def _words(number: int) -> str:
  if number < 20:
    return _UNITS[number]
  if number < 100:
    tens, units = divmod(number, 10)
    return _TENS[tens] + (f" {_UNITS[units]}" if units else "")
  if number < 1000:
    hundreds, rest = divmod(number, 100)
    text = f"{_UNITS[hundreds]} Hundred"
    return text + (f" And {_words(rest)}" if rest else "")
  for scale, name in _SCALES:
    if number >= scale:
      head, rest = divmod(number, scale)
      text = f"{_words(head)} {name}"
      return text + (f" {_words(rest)}" if rest else "")
  raise AssertionError(number)


def amount_in_words(amount: Decimal | int) -> str:
  """Spells out the whole-rupee part of an amount.

  Example: 123456 -> "One Lakh Twenty Three Thousand Four Hundred And Fifty
  Six Only".
  """
  value = int(Decimal(amount))
  if value < 0:
    raise InvalidArgumentError(f"Amount must be non-negative: {amount}")
  if value == 0:
    return "Zero Only"
  return f"{_words(value)} Only"


def format_bill_number(prefix: str, number: int) -> str:
  return f"{prefix}-{number}"


def format_bill_date(moment: datetime.datetime) -> str:
  return moment.strftime("%d-%m-%Y")


def format_bill_time(moment: datetime.datetime) -> str:
  hour = moment.hour % 12 or 12
  suffix = "PM" if moment.hour >= 12 else "AM"
  return f"{hour}:{moment:%M:%S} {suffix}"


def _row(left: str, right: str) -> str:
  space = max(BILL_WIDTH - len(left) - len(right), 1)
  return f"{left}{' ' * space}{right}"


def render_bill(
    record: BookingRecord,
    bill_number: str,
    resort: Optional[ResortDetails] = None,
    tz: Optional[datetime.tzinfo] = None,
) -> str:
  """Renders a fixed-width text bill for a persisted booking.

  Args:
    record: The committed booking.
    bill_number: Identifier printed on the bill, usually the booking id.
    resort: Letterhead details.
    tz: Time zone the bill time is printed in; defaults to the local zone.

  Returns:
    The bill as newline-separated text.
  """
  resort = resort or ResortDetails()
  moment = record.created_at.astimezone(tz)
  rule = "-" * BILL_WIDTH

  lines = [resort.name.center(BILL_WIDTH).rstrip()]
  for detail in (resort.address, resort.mobile, resort.email):
    if detail:
      lines.append(detail.center(BILL_WIDTH).rstrip())
  if resort.gstin:
    lines.append(f"GSTIN: {resort.gstin}".center(BILL_WIDTH).rstrip())
  lines.append(rule)
  lines.append(_row(f"Bill No: {bill_number}", format_bill_date(moment)))
  lines.append(
      _row(f"Service: {record.service.value}", format_bill_time(moment))
  )
  lines.append(f"Customer: {record.customer.name}")
  if record.customer.mobile:
    lines.append(f"Mobile: {record.customer.mobile}")
  lines.append(rule)

  for item in record.items:
    lines.append(
        _row(
            f"{item.name} x {item.quantity}",
            format_amount(item.subtotal),
        )
    )
    for component in item.components:
      lines.append(f"  - {component.service}: {component.name}")
  lines.append(rule)

  tax = record.tax
  lines.append(_row("Subtotal", format_amount(tax.subtotal)))
  if tax.tax_amount:
    label = f"Tax ({format_amount(tax.tax_percent)}%)"
    lines.append(_row(label, format_amount(tax.tax_amount)))
  lines.append(_row("Total", format_amount(tax.total)))
  lines.append(f"Rupees {amount_in_words(tax.total)}")
  lines.append(rule)
  lines.append(f"Payment: {record.payment_method.value}")
  if record.notes:
    lines.append(f"Notes: {record.notes}")
  lines.append("Thank you! Visit again.".center(BILL_WIDTH).rstrip())
  return "\n".join(lines)
