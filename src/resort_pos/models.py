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

"""Data models for the booking engine.

All money values are `decimal.Decimal`. Catalog item ids may arrive from the
backend as strings or integers; they are normalized to strings so that ids
coming from a URL path and ids coming from a JSON body compare equal.
"""

import datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PrivateAttr
from pydantic import computed_field
from pydantic import field_validator
from pydantic import model_validator

from .constants import WALK_IN_CUSTOMER_NAME
from .enums import PaymentMethod
from .enums import ServiceType


def _utcnow() -> datetime.datetime:
  return datetime.datetime.now(datetime.timezone.utc)


def _coerce_id(value: Any) -> Any:
  if isinstance(value, bool):
    raise ValueError("item id must be a string or an integer")
  if isinstance(value, int):
    return str(value)
  return value


class FrozenModel(BaseModel):
  """Base class for immutable value objects."""

  model_config = ConfigDict(frozen=True, populate_by_name=True)


class SubItemRef(FrozenModel):
  """One constituent of a multi-line item, e.g. a service inside a combo."""

  service: str
  name: str
  price: Decimal = Field(default=Decimal(0), ge=0)
  item_id: str | None = None

  @field_validator("item_id", mode="before")
  @classmethod
  def normalize_id(cls, value: Any) -> Any:
    return _coerce_id(value)


class CatalogItem(FrozenModel):
  """A sellable unit such as a game, a theater seat, a room or a combo."""

  id: str
  display_name: str
  unit_price: Decimal = Field(ge=0)
  category: str | None = None
  available: bool = True
  components: tuple[SubItemRef, ...] = ()

  @field_validator("id", mode="before")
  @classmethod
  def normalize_id(cls, value: Any) -> Any:
    return _coerce_id(value)

  @property
  def is_multi_line(self) -> bool:
    return bool(self.components)


class CatalogSnapshot(FrozenModel):
  """An ordered catalog captured at one sync instant."""

  items: tuple[CatalogItem, ...] = ()
  fetched_at: datetime.datetime = Field(default_factory=_utcnow)
  # Tax rate fetched together with the catalog; None when it is unknown.
  tax_percent: Decimal | None = None

  _index: dict[str, CatalogItem] = PrivateAttr(default_factory=dict)

  @model_validator(mode="after")
  def check_unique_ids(self) -> "CatalogSnapshot":
    seen = set()
    for item in self.items:
      if item.id in seen:
        raise ValueError(f"Duplicate catalog item id {item.id!r}")
      seen.add(item.id)
    return self

  def model_post_init(self, __context: Any) -> None:
    self._index.update((item.id, item) for item in self.items)

  @computed_field
  @property
  def fingerprint(self) -> tuple[str, ...]:
    """Item ids in catalog order."""
    return tuple(item.id for item in self.items)

  def lookup(self, item_id: str | int) -> CatalogItem | None:
    return self._index.get(str(item_id))


class SelectionEntry(FrozenModel):
  """A selected quantity of one catalog item (never zero)."""

  item_id: str
  display_name: str
  quantity: int = Field(ge=1)
  last_seen_price: Decimal = Field(ge=0)
  sub_items: tuple[SubItemRef, ...] = ()


class LedgerLine(FrozenModel):
  """A priced view of a selection entry."""

  item_id: str
  display_name: str
  quantity: int
  unit_price: Decimal
  subtotal: Decimal
  sub_items: tuple[SubItemRef, ...] = ()


class LedgerSnapshot(FrozenModel):
  entries: tuple[LedgerLine, ...] = ()
  total_units: int = 0
  subtotal: Decimal = Decimal(0)


class TaxBreakdown(FrozenModel):
  subtotal: Decimal
  tax_percent: Decimal
  tax_amount: Decimal
  total: Decimal


class Quote(FrozenModel):
  """The ledger and totals frozen when checkout begins."""

  ledger: LedgerSnapshot
  tax: TaxBreakdown


class CustomerRef(FrozenModel):
  """The customer a booking is attached to; defaults to a walk-in."""

  customer_id: str | None = Field(
      default=None,
      validation_alias=AliasChoices("customer_id", "customerId", "id"),
  )
  name: str = WALK_IN_CUSTOMER_NAME
  mobile: str = ""

  @field_validator("customer_id", mode="before")
  @classmethod
  def normalize_id(cls, value: Any) -> Any:
    return _coerce_id(value)

  @field_validator("mobile", mode="before")
  @classmethod
  def none_mobile_to_empty(cls, value: Any) -> Any:
    return "" if value is None else value


class BookingLineItem(FrozenModel):
  item_id: str
  name: str
  quantity: int
  unit_price: Decimal
  subtotal: Decimal
  components: tuple[SubItemRef, ...] = ()


class BookingRecord(FrozenModel):
  """The outbound artifact handed to the persistence collaborator."""

  customer: CustomerRef
  service: ServiceType
  items: tuple[BookingLineItem, ...]
  tax: TaxBreakdown
  total_units: int
  payment_method: PaymentMethod
  payment_reference: str | None = None
  notes: str | None = None
  idempotency_token: str
  created_at: datetime.datetime = Field(default_factory=_utcnow)


class PersistResult(FrozenModel):
  booking_id: str = Field(
      validation_alias=AliasChoices("booking_id", "bookingId", "_id", "id")
  )

  @field_validator("booking_id", mode="before")
  @classmethod
  def normalize_id(cls, value: Any) -> Any:
    return _coerce_id(value)
