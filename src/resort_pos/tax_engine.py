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

"""Tax computation for booking totals.

The tax amount is rounded to a whole currency unit with round-half-up, so a
subtotal of 250 at 5% (12.5) yields a tax of 13. The total is always the exact
sum of the subtotal and the rounded tax amount.
"""

from decimal import Decimal
from decimal import InvalidOperation
from decimal import ROUND_HALF_UP
from typing import Union

from .exceptions import InvalidArgumentError
from .models import TaxBreakdown

Number = Union[int, float, Decimal, str]

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)
_WHOLE_UNIT = Decimal(1)


def _to_decimal(value: Number, name: str) -> Decimal:
  """Converts a numeric input to Decimal, rejecting non-finite values."""
  if isinstance(value, bool):
    raise InvalidArgumentError(f"{name} must be a number, got {value!r}")
  try:
    if isinstance(value, Decimal):
      result = value
    else:
      # str() first so floats convert by their shortest repr
      result = Decimal(str(value).strip())
  except (InvalidOperation, ValueError) as e:
    raise InvalidArgumentError(f"{name} must be a number, got {value!r}") from e
  if not result.is_finite():
    raise InvalidArgumentError(f"{name} must be finite, got {value!r}")
  return result


def compute(subtotal: Number, tax_percent: Number) -> TaxBreakdown:
  """Computes the tax breakdown for a subtotal.

  Args:
    subtotal: Non-negative amount before tax.
    tax_percent: Tax rate as a percentage in [0, 100].

  Returns:
    A TaxBreakdown with total == subtotal + tax_amount.

  Raises:
    InvalidArgumentError: If either input is malformed or out of range.
  """
  subtotal_dec = _to_decimal(subtotal, "subtotal")
  percent_dec = _to_decimal(tax_percent, "tax_percent")

  if subtotal_dec < _ZERO:
    raise InvalidArgumentError(f"subtotal must be non-negative, got {subtotal}")
  if percent_dec < _ZERO or percent_dec > _HUNDRED:
    raise InvalidArgumentError(
        f"tax_percent must be between 0 and 100, got {tax_percent}"
    )

  if percent_dec == _ZERO:
    tax_amount = _ZERO
  else:
    tax_amount = (subtotal_dec * percent_dec / _HUNDRED).quantize(
        _WHOLE_UNIT, rounding=ROUND_HALF_UP
    )

  return TaxBreakdown(
      subtotal=subtotal_dec,
      tax_percent=percent_dec,
      tax_amount=tax_amount,
      total=subtotal_dec + tax_amount,
  )


def parse_tax_percent(text: str) -> Decimal:
  """Validates a tax percentage typed into a settings field."""
  if text is None or not str(text).strip():
    raise InvalidArgumentError("Tax percentage is required")
  percent = _to_decimal(text, "tax_percent")
  if percent < _ZERO or percent > _HUNDRED:
    raise InvalidArgumentError(
        f"Tax percentage must be between 0 and 100, got {text}"
    )
  return percent
