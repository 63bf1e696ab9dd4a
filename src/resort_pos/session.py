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

"""Booking sessions: one selling screen's catalog, cart and checkout.

A `BookingSession` binds a `CatalogSync`, a `SelectionLedger` and a
`CheckoutFlow` for one service type and exposes the operations a selling
screen performs. The backend collaborator is injected so that sessions can be
driven by the HTTP client in production and by fakes in tests.
"""

from decimal import Decimal
import logging
from typing import Iterable, Optional, Protocol
import uuid

from .billing import ResortDetails
from .billing import render_bill
from .catalog_sync import CatalogSync
from .checkout_flow import CheckoutFlow
from .checkout_flow import build_quote
from .constants import DEFAULT_SYNC_INTERVAL_SECONDS
from .constants import MIN_CUSTOMER_QUERY_LENGTH
from .enums import CheckoutState
from .enums import PaymentMethod
from .enums import ScreenMode
from .enums import ServiceType
from .exceptions import InvalidArgumentError
from .exceptions import InvalidTransitionError
from .exceptions import SessionLockedError
from .exceptions import SyncFailureError
from .ledger import SelectionLedger
from .models import BookingRecord
from .models import CatalogItem
from .models import CatalogSnapshot
from .models import CustomerRef
from .models import LedgerSnapshot
from .models import PersistResult
from .models import Quote
from .models import SelectionEntry
from .models import SubItemRef
from .models import TaxBreakdown
from .payment import Payee

logger = logging.getLogger(__name__)


class Backend(Protocol):
  """The remote collaborators a session depends on."""

  async def fetch_catalog(self, service: ServiceType) -> CatalogSnapshot:
    ...

  async def fetch_tax_rate(self, service: ServiceType) -> Decimal:
    ...

  async def persist_booking(self, record: BookingRecord) -> PersistResult:
    ...

  async def search_customers(self, query: str) -> list[CustomerRef]:
    ...


class BookingSession:
  """Selling screen state for one service type."""

  def __init__(
      self,
      service: ServiceType | str,
      backend: Backend,
      sync_interval: float = DEFAULT_SYNC_INTERVAL_SECONDS,
      payee: Optional[Payee] = None,
      sync: Optional[CatalogSync] = None,
      session_id: Optional[str] = None,
  ):
    try:
      self.service = ServiceType(service)
    except ValueError as e:
      raise InvalidArgumentError(f"Unknown service {service!r}") from e

    self.id = session_id or uuid.uuid4().hex
    self._backend = backend
    self._sync_interval = sync_interval
    self.sync = sync or CatalogSync()
    self.ledger = SelectionLedger()
    self.flow = CheckoutFlow(
        self.service,
        self.ledger,
        self._lookup,
        lambda: self._tax_percent,
        backend.persist_booking,
        payee=payee,
    )
    self._tax_percent = Decimal(0)
    self._mode = ScreenMode.NORMAL
    self._customer = CustomerRef()
    self._catalog_version = 0

  # --- Catalog ---

  def start(self) -> None:
    """Starts catalog synchronization; requires a running event loop."""
    self.sync.start(
        self._fetch,
        self._sync_interval,
        on_snapshot=self._on_snapshot,
        on_fetched=self._on_fetched,
    )
    logger.info("%s session %s started", self.service.value, self.id)

  def stop(self) -> None:
    self.sync.stop()
    logger.info("%s session %s stopped", self.service.value, self.id)

  async def _fetch(self) -> CatalogSnapshot:
    """Fetches the catalog and the tax rate that goes with it.

    The rate travels on the snapshot and is applied only when the sync accepts
    the response.
    """
    snapshot = await self._backend.fetch_catalog(self.service)
    try:
      tax_percent = await self._backend.fetch_tax_rate(self.service)
    except SyncFailureError as e:
      logger.debug(
          "Tax rate of %s unavailable: %s", self.service.value, e.message
      )
      return snapshot
    return snapshot.model_copy(update={"tax_percent": tax_percent})

  def _on_fetched(self, snapshot: CatalogSnapshot) -> None:
    if snapshot.tax_percent is not None:
      self._tax_percent = snapshot.tax_percent

  def _on_snapshot(self, snapshot: CatalogSnapshot) -> None:
    self._catalog_version += 1
    logger.debug(
        "%s catalog updated (%d items)", self.service.value, len(snapshot.items)
    )

  async def retry_load(self) -> Optional[CatalogSnapshot]:
    """Fetches the catalog again after a failed first load."""
    return await self.sync.refresh()

  def _lookup(self, item_id: str) -> Optional[CatalogItem]:
    snapshot = self.sync.latest
    return snapshot.lookup(item_id) if snapshot is not None else None

  def get_snapshot(self) -> Optional[CatalogSnapshot]:
    return self.sync.latest

  @property
  def catalog_version(self) -> int:
    """Incremented each time a changed catalog is delivered."""
    return self._catalog_version

  @property
  def loading(self) -> bool:
    return self.sync.loading

  @property
  def error(self) -> Optional[SyncFailureError]:
    return self.sync.error

  @property
  def tax_percent(self) -> Decimal:
    return self._tax_percent

  # --- Selection ---

  @property
  def mode(self) -> ScreenMode:
    return self._mode

  def set_mode(self, mode: ScreenMode | str) -> None:
    try:
      self._mode = ScreenMode(mode)
    except ValueError as e:
      raise InvalidArgumentError(f"Unknown screen mode {mode!r}") from e

  @property
  def customer(self) -> CustomerRef:
    return self._customer

  def attach_customer(self, customer: Optional[CustomerRef]) -> None:
    """Sets the customer of the next booking; None selects a walk-in."""
    self._ensure_mutable("change the customer")
    if self.flow.state == CheckoutState.FAILED:
      raise InvalidTransitionError(
          "Cancel the failed checkout before changing the customer"
      )
    self._customer = customer or CustomerRef()

  def _ensure_mutable(self, action: str) -> None:
    if self.flow.state == CheckoutState.COMMITTING:
      raise SessionLockedError(f"Cannot {action} while the booking is saving")
    if self.flow.state == CheckoutState.COMPLETED:
      raise SessionLockedError(
          f"Cannot {action} until the next sale is started"
      )

  def increment(
      self,
      item_id: str | int,
      sub_items: Optional[Iterable[SubItemRef]] = None,
  ) -> Optional[SelectionEntry]:
    """Adds one unit of an item to the selection.

    Returns None without changing anything while the screen is in edit or
    delete mode.
    """
    self._ensure_mutable("change the selection")
    if self._mode != ScreenMode.NORMAL:
      return None
    entry = self.ledger.increment(item_id, self._lookup, sub_items)
    self.flow.invalidate()
    return entry

  def decrement(self, item_id: str | int) -> Optional[SelectionEntry]:
    self._ensure_mutable("change the selection")
    if self._mode != ScreenMode.NORMAL or item_id not in self.ledger:
      return None
    entry = self.ledger.decrement(item_id)
    self.flow.invalidate()
    return entry

  def clear_selection(self) -> None:
    self._ensure_mutable("clear the selection")
    if self.ledger.is_empty:
      return
    self.ledger.clear()
    self.flow.invalidate()

  def get_summary(self) -> LedgerSnapshot:
    """The selection priced at current catalog prices."""
    return self.ledger.snapshot(self._lookup)

  def get_totals(self) -> TaxBreakdown:
    """Totals of the frozen quote during checkout, live totals otherwise."""
    if self.flow.quote is not None:
      return self.flow.quote.tax
    return build_quote(self.ledger, self._lookup, self._tax_percent).tax

  # --- Checkout ---

  def proceed_to_checkout(self) -> Quote:
    return self.flow.proceed_to_checkout()

  def choose_payment_method(
      self, method: PaymentMethod | str
  ) -> Optional[str]:
    return self.flow.choose_payment_method(method)

  def confirm_payment_received(self) -> None:
    self.flow.confirm_payment_received()

  async def commit(
      self,
      customer: Optional[CustomerRef] = None,
      notes: Optional[str] = None,
  ) -> PersistResult:
    """Persists the booking for the given or the attached customer.

    A retry after a failure resends the failed booking as it was.
    """
    if self.flow.state == CheckoutState.FAILED:
      return await self.flow.commit(customer, notes)
    if customer is not None:
      self.attach_customer(customer)
    return await self.flow.commit(self._customer, notes)

  def cancel(self) -> None:
    self.flow.cancel()

  def reset(self) -> None:
    """Starts the next sale; the customer goes back to walk-in."""
    self.flow.reset()
    self._customer = CustomerRef()

  def render_bill(self, resort: Optional[ResortDetails] = None) -> str:
    if self.flow.state != CheckoutState.COMPLETED:
      raise InvalidTransitionError("No completed booking to bill")
    return render_bill(self.flow.record, self.flow.result.booking_id, resort)

  # --- Customers ---

  async def search_customers(self, query: str) -> list[CustomerRef]:
    if len((query or "").strip()) < MIN_CUSTOMER_QUERY_LENGTH:
      return []
    return await self._backend.search_customers(query.strip())
