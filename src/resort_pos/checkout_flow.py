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

"""Checkout state machine for a booking session.

This module provides the `CheckoutFlow` class, which drives one sale from the
selection to a persisted booking record:

  Idle -> AwaitingPaymentChoice -> [AwaitingPaymentConfirmation] ->
  Committing -> Completed | Failed

Key responsibilities include:
- Freezing a quote (priced selection and tax) when checkout begins.
- Preparing the scan-to-pay reference for methods that need confirmation.
- Calling the persistence collaborator, and only from the Committing state.
- Attaching an idempotency token that is reused when a failed commit is
  retried, so the backend can de-duplicate a booking whose response was lost.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
import uuid

from . import tax_engine
from .enums import CheckoutState
from .enums import PaymentMethod
from .enums import ServiceType
from .exceptions import CommitFailureError
from .exceptions import EmptySelectionError
from .exceptions import InvalidArgumentError
from .exceptions import InvalidTransitionError
from .exceptions import SessionLockedError
from .ledger import PriceLookup
from .ledger import SelectionLedger
from .models import BookingLineItem
from .models import BookingRecord
from .models import CustomerRef
from .models import PersistResult
from .models import Quote
from .payment import Payee
from .payment import build_payment_reference

logger = logging.getLogger(__name__)

PersistBooking = Callable[[BookingRecord], Awaitable[PersistResult]]

_LOCKED_STATES = (CheckoutState.COMMITTING, CheckoutState.COMPLETED)
_PRE_COMMIT_STATES = (
    CheckoutState.AWAITING_PAYMENT_CHOICE,
    CheckoutState.AWAITING_PAYMENT_CONFIRMATION,
    CheckoutState.FAILED,
)


def build_quote(
    ledger: SelectionLedger, price_lookup: PriceLookup, tax_percent
) -> Quote:
  """Prices the ledger against the catalog and applies tax."""
  ledger_snapshot = ledger.snapshot(price_lookup)
  return Quote(
      ledger=ledger_snapshot,
      tax=tax_engine.compute(ledger_snapshot.subtotal, tax_percent),
  )


def _new_token() -> str:
  return str(uuid.uuid4())


class CheckoutFlow:
  """State machine for one checkout at a time."""

  def __init__(
      self,
      service: ServiceType,
      ledger: SelectionLedger,
      price_lookup: PriceLookup,
      tax_percent: Callable[[], object],
      persist_booking: PersistBooking,
      payee: Optional[Payee] = None,
      token_factory: Callable[[], str] = _new_token,
  ):
    self.service = service
    self._ledger = ledger
    self._price_lookup = price_lookup
    self._tax_percent = tax_percent
    self._persist_booking = persist_booking
    self._payee = payee or Payee()
    self._token_factory = token_factory

    self._state = CheckoutState.IDLE
    self._quote: Optional[Quote] = None
    self._method: Optional[PaymentMethod] = None
    self._payment_reference: Optional[str] = None
    self._payment_confirmed = False
    self._token: Optional[str] = None
    self._record: Optional[BookingRecord] = None
    self._result: Optional[PersistResult] = None
    self._last_error: Optional[CommitFailureError] = None

  @property
  def state(self) -> CheckoutState:
    return self._state

  @property
  def quote(self) -> Optional[Quote]:
    return self._quote

  @property
  def payment_method(self) -> Optional[PaymentMethod]:
    return self._method

  @property
  def payment_reference(self) -> Optional[str]:
    return self._payment_reference

  @property
  def payment_confirmed(self) -> bool:
    return self._payment_confirmed

  @property
  def idempotency_token(self) -> Optional[str]:
    return self._token

  @property
  def record(self) -> Optional[BookingRecord]:
    """The booking record of the current or last commit attempt."""
    return self._record

  @property
  def result(self) -> Optional[PersistResult]:
    return self._result

  @property
  def last_error(self) -> Optional[CommitFailureError]:
    return self._last_error

  @property
  def is_locked(self) -> bool:
    """Whether the cart is frozen (commit in flight or booking completed)."""
    return self._state in _LOCKED_STATES

  def _ensure_not_locked(self, action: str) -> None:
    if self._state == CheckoutState.COMMITTING:
      raise SessionLockedError(f"Cannot {action} while the booking is saving")
    if self._state == CheckoutState.COMPLETED:
      raise SessionLockedError(
          f"Cannot {action} after the booking was completed"
      )

  def _reset_checkout(self) -> None:
    self._state = CheckoutState.IDLE
    self._quote = None
    self._method = None
    self._payment_reference = None
    self._payment_confirmed = False
    self._token = None
    self._last_error = None

  def proceed_to_checkout(self) -> Quote:
    """Freezes the current selection and asks for a payment method.

    Raises:
      EmptySelectionError: If nothing is selected; the state is unchanged.
    """
    self._ensure_not_locked("start checkout")
    if self._state != CheckoutState.IDLE:
      raise InvalidTransitionError(
          f"Checkout already started (state '{self._state.value}')"
      )

    quote = build_quote(self._ledger, self._price_lookup, self._tax_percent())
    if quote.ledger.total_units <= 0:
      raise EmptySelectionError()

    self._quote = quote
    self._state = CheckoutState.AWAITING_PAYMENT_CHOICE
    logger.info(
        "%s checkout started: %d units, total %s",
        self.service.value,
        quote.ledger.total_units,
        quote.tax.total,
    )
    return quote

  def choose_payment_method(self, method: PaymentMethod | str) -> Optional[str]:
    """Records the payment method.

    Methods that need confirmation (scan-to-pay) move to
    AwaitingPaymentConfirmation and return the payment reference to display.
    Immediate methods stay in AwaitingPaymentChoice, ready to commit.
    """
    try:
      method = PaymentMethod(method)
    except ValueError as e:
      raise InvalidArgumentError(f"Unknown payment method {method!r}") from e

    self._ensure_not_locked("change the payment method")
    if self._state not in (
        CheckoutState.AWAITING_PAYMENT_CHOICE,
        CheckoutState.AWAITING_PAYMENT_CONFIRMATION,
    ):
      raise InvalidTransitionError(
          "Proceed to checkout before choosing a payment method"
      )

    self._method = method
    self._payment_confirmed = False
    if method.requires_confirmation:
      self._payment_reference = build_payment_reference(
          self._quote.tax.total, self._payee
      )
      self._state = CheckoutState.AWAITING_PAYMENT_CONFIRMATION
    else:
      self._payment_reference = None
      self._state = CheckoutState.AWAITING_PAYMENT_CHOICE
    return self._payment_reference

  def confirm_payment_received(self) -> None:
    """Staff confirmation that a scan-to-pay payment arrived."""
    self._ensure_not_locked("confirm payment")
    if self._state != CheckoutState.AWAITING_PAYMENT_CONFIRMATION:
      raise InvalidTransitionError("No payment is awaiting confirmation")
    self._payment_confirmed = True

  def _ensure_ready_to_commit(self) -> None:
    self._ensure_not_locked("commit")
    if self._state == CheckoutState.FAILED:
      return
    if self._state == CheckoutState.AWAITING_PAYMENT_CHOICE:
      if self._method is None:
        raise InvalidTransitionError("Select a payment method first")
      return
    if self._state == CheckoutState.AWAITING_PAYMENT_CONFIRMATION:
      if not self._payment_confirmed:
        raise InvalidTransitionError("Confirm that the payment was received")
      return
    raise InvalidTransitionError("Proceed to checkout before committing")

  def _build_record(
      self, customer: CustomerRef, notes: Optional[str]
  ) -> BookingRecord:
    items = tuple(
        BookingLineItem(
            item_id=line.item_id,
            name=line.display_name,
            quantity=line.quantity,
            unit_price=line.unit_price,
            subtotal=line.subtotal,
            components=line.sub_items,
        )
        for line in self._quote.ledger.entries
    )
    return BookingRecord(
        customer=customer,
        service=self.service,
        items=items,
        tax=self._quote.tax,
        total_units=self._quote.ledger.total_units,
        payment_method=self._method,
        payment_reference=self._payment_reference,
        notes=notes,
        idempotency_token=self._token,
    )

  async def commit(
      self,
      customer: Optional[CustomerRef] = None,
      notes: Optional[str] = None,
  ) -> PersistResult:
    """Persists the booking.

    A retry after a failure resends the previous record, idempotency token
    included.

    Raises:
      SessionLockedError: If a commit is in flight or already completed.
      InvalidTransitionError: If payment is not settled yet, or a retry asks
        for a different customer or notes.
      CommitFailureError: If persistence failed; the selection is kept.
    """
    self._ensure_ready_to_commit()

    if self._state == CheckoutState.FAILED and self._record is not None:
      # The backend may already hold this token; the retry must match it.
      record = self._record
      if (customer is not None and customer != record.customer) or (
          notes is not None and notes != record.notes
      ):
        raise InvalidTransitionError(
            "A failed booking is retried unchanged; cancel the checkout to"
            " change its customer or notes"
        )
    else:
      if self._token is None:
        self._token = self._token_factory()
      record = self._build_record(customer or CustomerRef(), notes)

    self._record = record
    self._state = CheckoutState.COMMITTING
    logger.info(
        "Committing %s booking %s for %s",
        self.service.value,
        record.idempotency_token,
        record.customer.name,
    )

    try:
      result = await self._persist_booking(record)
    except asyncio.CancelledError:
      self._state = CheckoutState.FAILED
      raise
    except CommitFailureError as e:
      self._fail(e)
      raise
    except Exception as e:  # pylint: disable=broad-exception-caught
      error = CommitFailureError(f"Could not save booking: {e}")
      self._fail(error)
      raise error from e

    self._ledger.clear()
    self._result = result
    self._last_error = None
    self._state = CheckoutState.COMPLETED
    logger.info(
        "%s booking %s saved as %s",
        self.service.value,
        record.idempotency_token,
        result.booking_id,
    )
    return result

  def _fail(self, error: CommitFailureError) -> None:
    self._state = CheckoutState.FAILED
    self._last_error = error
    logger.warning(
        "Booking %s failed, selection kept for retry: %s",
        self._token,
        error.message,
    )

  def cancel(self) -> None:
    """Abandons the checkout; the selection is left untouched."""
    self._ensure_not_locked("cancel")
    if self._state != CheckoutState.IDLE:
      logger.info("%s checkout cancelled", self.service.value)
    self._reset_checkout()
    self._record = None

  def reset(self) -> None:
    """Starts the next sale after a completed booking."""
    if self._state == CheckoutState.IDLE:
      return
    if self._state != CheckoutState.COMPLETED:
      raise InvalidTransitionError(
          "Only a completed checkout can be reset"
          f" (state '{self._state.value}')"
      )
    self._reset_checkout()
    self._record = None
    self._result = None

  def invalidate(self) -> None:
    """Drops an open checkout because the selection changed under it."""
    if self._state in _PRE_COMMIT_STATES:
      logger.info(
          "%s selection changed during checkout; returning to idle",
          self.service.value,
      )
      self._reset_checkout()
      self._record = None
