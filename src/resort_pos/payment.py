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

"""Payment intents prepared at the counter.

No payment is processed here. For scan-to-pay the engine only produces the
UPI deep link that is rendered as a QR code; staff confirm receipt by hand.
"""

from decimal import Decimal
from decimal import ROUND_HALF_UP
from urllib.parse import quote

from pydantic import BaseModel
from pydantic import ConfigDict

from .constants import DEFAULT_CURRENCY
from .constants import DEFAULT_PAYEE_NAME
from .constants import DEFAULT_PAYEE_VPA
from .constants import UPI_SCHEME
from .exceptions import InvalidArgumentError


class Payee(BaseModel):
  """The account that receives scan-to-pay payments."""

  model_config = ConfigDict(frozen=True)

  vpa: str = DEFAULT_PAYEE_VPA
  name: str = DEFAULT_PAYEE_NAME
  currency: str = DEFAULT_CURRENCY


def format_amount(amount: Decimal) -> str:
  """Renders whole amounts without decimals and others with two places."""
  if amount == amount.to_integral_value():
    return str(int(amount))
  return str(amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def build_payment_reference(amount: Decimal, payee: Payee) -> str:
  """Builds the UPI payment link for an amount.

  The result depends only on the amount and the payee, so re-displaying the
  QR code for the same checkout always shows the same link.
  """
  if amount < 0:
    raise InvalidArgumentError(f"Payment amount must be non-negative: {amount}")
  return (
      f"{UPI_SCHEME}?pa={payee.vpa}"
      f"&pn={quote(payee.name, safe='')}"
      f"&am={format_amount(amount)}"
      f"&cu={payee.currency}"
  )
