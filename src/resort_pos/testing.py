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

"""In-memory stand-ins for the backend, for tests and local demos."""

import asyncio
from decimal import Decimal
from typing import Any, Iterable, Optional

from . import static_catalog
from .constants import MIN_CUSTOMER_QUERY_LENGTH
from .enums import ServiceType
from .exceptions import SyncFailureError
from .models import BookingRecord
from .models import CatalogItem
from .models import CatalogSnapshot
from .models import CustomerRef
from .models import PersistResult


def make_item(item_id: Any, price: Any, name: Optional[str] = None, **kwargs):
  """Shorthand for a CatalogItem."""
  return CatalogItem(
      id=item_id,
      display_name=name or f"Item {item_id}",
      unit_price=Decimal(str(price)),
      **kwargs,
  )


class FakeBackend:
  """Backend double that serves a fixed catalog and records bookings.

  Set `catalog_error`, `tax_error` or `persist_error` to make the matching
  call fail. When `persist_gate` is set, persistence waits for the event.
  """

  def __init__(
      self,
      items: Iterable[CatalogItem] = (),
      tax_percent: Any = 0,
      customers: Iterable[CustomerRef] = (),
  ):
    self.items = list(items)
    self.tax_percent: Optional[Decimal] = Decimal(str(tax_percent))
    self.customers = list(customers)
    self.catalog_error: Optional[SyncFailureError] = None
    self.tax_error: Optional[SyncFailureError] = None
    self.persist_error: Optional[Exception] = None
    self.persist_gate: Optional[asyncio.Event] = None
    self.catalog_calls = 0
    self.persisted: list[BookingRecord] = []
    self.search_queries: list[str] = []
    self._next_booking = 0

  async def fetch_catalog(self, service: ServiceType) -> CatalogSnapshot:
    self.catalog_calls += 1
    if self.catalog_error is not None:
      raise self.catalog_error
    if service in static_catalog.STATIC_SERVICES:
      return static_catalog.static_snapshot(service)
    return CatalogSnapshot(items=tuple(self.items))

  async def fetch_tax_rate(self, service: ServiceType) -> Decimal:
    del service  # Unused.
    if self.tax_error is not None:
      raise self.tax_error
    return self.tax_percent if self.tax_percent is not None else Decimal(0)

  async def persist_booking(self, record: BookingRecord) -> PersistResult:
    self.persisted.append(record)
    if self.persist_gate is not None:
      await self.persist_gate.wait()
    if self.persist_error is not None:
      raise self.persist_error
    self._next_booking += 1
    return PersistResult(booking_id=f"BK{self._next_booking}")

  async def search_customers(self, query: str) -> list[CustomerRef]:
    query = (query or "").strip()
    if len(query) < MIN_CUSTOMER_QUERY_LENGTH:
      return []
    self.search_queries.append(query)
    needle = query.lower()
    return [
        c
        for c in self.customers
        if needle in c.name.lower() or query in c.mobile
    ]

