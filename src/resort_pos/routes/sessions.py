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

"""Booking session routes for the front-desk server."""

import logging
from typing import Any, Optional

from fastapi import APIRouter
from fastapi import Body
from fastapi import Depends
from fastapi import Path
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from .. import dependencies
from ..backend import BackendClient
from ..enums import PaymentMethod
from ..enums import ScreenMode
from ..enums import ServiceType
from ..models import CustomerRef
from ..models import SubItemRef
from ..registry import SessionRegistry
from ..session import BookingSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions")


class CreateSessionRequest(BaseModel):
  service: ServiceType


class IncrementRequest(BaseModel):
  sub_items: Optional[list[SubItemRef]] = None


class PaymentMethodRequest(BaseModel):
  method: PaymentMethod


class ModeRequest(BaseModel):
  mode: ScreenMode


class CustomerRequest(BaseModel):
  customer: Optional[CustomerRef] = None


class CommitRequest(BaseModel):
  customer: Optional[CustomerRef] = None
  notes: Optional[str] = None


def session_view(session: BookingSession) -> dict[str, Any]:
  """Everything a selling screen renders, as one JSON document."""
  flow = session.flow
  snapshot = session.get_snapshot()
  return {
      "id": session.id,
      "service": session.service.value,
      "loading": session.loading,
      "error": session.error.message if session.error else None,
      "mode": session.mode.value,
      "catalog": (
          [item.model_dump() for item in snapshot.items] if snapshot else []
      ),
      "catalog_version": session.catalog_version,
      "selection": session.get_summary().model_dump(),
      "totals": session.get_totals().model_dump(),
      "customer": session.customer.model_dump(),
      "checkout": {
          "state": flow.state.value,
          "payment_method": (
              flow.payment_method.value if flow.payment_method else None
          ),
          "payment_reference": flow.payment_reference,
          "payment_confirmed": flow.payment_confirmed,
          "idempotency_token": flow.idempotency_token,
          "booking_id": flow.result.booking_id if flow.result else None,
          "error": flow.last_error.message if flow.last_error else None,
      },
  }


@router.post("", status_code=201, operation_id="create_session")
async def create_session(
    request: CreateSessionRequest,
    registry: SessionRegistry = Depends(dependencies.get_registry),
    backend: BackendClient = Depends(dependencies.get_backend),
) -> dict[str, Any]:
  """Create a selling screen session and start its catalog sync."""
  session = registry.create(request.service, backend)
  logger.info("Created %s session %s", session.service.value, session.id)
  return session_view(session)


@router.get("/{id}", operation_id="get_session")
async def get_session(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  return session_view(session)


@router.delete("/{id}", operation_id="delete_session")
async def delete_session(
    session_id: str = Path(..., alias="id"),
    registry: SessionRegistry = Depends(dependencies.get_registry),
) -> dict[str, Any]:
  """Stop a session and discard its selection."""
  registry.remove(session_id)
  return {"status": "stopped"}


@router.post("/{id}/retry", operation_id="retry_load")
async def retry_load(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  """Fetch the catalog again, e.g. after a failed first load."""
  await session.retry_load()
  return session_view(session)


@router.post("/{id}/mode", operation_id="set_mode")
async def set_mode(
    request: ModeRequest,
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.set_mode(request.mode)
  return session_view(session)


@router.post("/{id}/items/{item_id}/increment", operation_id="increment")
async def increment(
    item_id: str,
    request: Optional[IncrementRequest] = Body(None),
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  sub_items = request.sub_items if request else None
  session.increment(item_id, sub_items)
  return session_view(session)


@router.post("/{id}/items/{item_id}/decrement", operation_id="decrement")
async def decrement(
    item_id: str,
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.decrement(item_id)
  return session_view(session)


@router.get("/{id}/totals", operation_id="get_totals")
async def get_totals(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  return session.get_totals().model_dump()


@router.post("/{id}/customer", operation_id="attach_customer")
async def attach_customer(
    request: CustomerRequest,
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  """Attach a customer to the sale; an empty body selects a walk-in."""
  session.attach_customer(request.customer)
  return session_view(session)


@router.post("/{id}/checkout", operation_id="proceed_to_checkout")
async def proceed_to_checkout(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.proceed_to_checkout()
  return session_view(session)


@router.post("/{id}/payment-method", operation_id="choose_payment_method")
async def choose_payment_method(
    request: PaymentMethodRequest,
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.choose_payment_method(request.method)
  return session_view(session)


@router.post("/{id}/payment-received", operation_id="confirm_payment")
async def confirm_payment_received(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.confirm_payment_received()
  return session_view(session)


@router.post("/{id}/commit", operation_id="commit")
async def commit(
    request: Optional[CommitRequest] = Body(None),
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  """Persist the booking."""
  request = request or CommitRequest()
  await session.commit(request.customer, request.notes)
  return session_view(session)


@router.post("/{id}/cancel", operation_id="cancel")
async def cancel(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  session.cancel()
  return session_view(session)


@router.post("/{id}/reset", operation_id="reset")
async def reset(
    session: BookingSession = Depends(dependencies.get_session),
) -> dict[str, Any]:
  """Start the next sale after a completed booking."""
  session.reset()
  return session_view(session)


@router.get(
    "/{id}/bill", response_class=PlainTextResponse, operation_id="get_bill"
)
async def get_bill(
    session: BookingSession = Depends(dependencies.get_session),
) -> str:
  """Printable bill of the completed booking."""
  return session.render_bill()
