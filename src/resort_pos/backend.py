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

"""HTTP client for the resort backend.

`BackendClient` implements the collaborators a booking session depends on:
catalog and tax rate fetches, booking persistence and customer search. Each
service type is described by a `ServiceConfig` naming its catalog endpoint, the
id and price fields of its catalog items, its booking endpoint and its tax
settings key. Services without a remote catalog are served from the static
catalogs bundled with the package.
"""

from decimal import Decimal
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import ValidationError

from . import static_catalog
from . import tax_engine
from .constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from .constants import IDEMPOTENCY_KEY_HEADER
from .constants import MIN_CUSTOMER_QUERY_LENGTH
from .enums import ServiceType
from .exceptions import BookingError
from .exceptions import CommitFailureError
from .exceptions import InvalidArgumentError
from .exceptions import SyncFailureError
from .models import BookingRecord
from .models import CatalogItem
from .models import CatalogSnapshot
from .models import CustomerRef
from .models import PersistResult
from .models import SubItemRef

logger = logging.getLogger(__name__)


class ServiceConfig(BaseModel):
  """How one service type maps onto the backend."""

  model_config = ConfigDict(frozen=True)

  catalog_path: Optional[str] = None
  id_field: str = "id"
  price_field: str = "price"
  booking_path: str = "/bookings"
  tax_key: str
  # Shared catalogs (the restaurant menu) are narrowed to these categories.
  categories: Optional[frozenset[str]] = None

  def accepts(self, item: CatalogItem) -> bool:
    if self.categories is None:
      return True
    return (item.category or "").strip().lower() in self.categories


SERVICE_CONFIGS: dict[ServiceType, ServiceConfig] = {
    ServiceType.GAMES: ServiceConfig(
        catalog_path="/games",
        id_field="gameId",
        price_field="rate",
        tax_key="games",
    ),
    ServiceType.POOL: ServiceConfig(
        catalog_path="/pool-types",
        id_field="typeId",
        booking_path="/pool-orders",
        tax_key="pool",
    ),
    ServiceType.MASSAGE: ServiceConfig(
        catalog_path="/massage-items",
        id_field="itemId",
        booking_path="/massage-orders",
        tax_key="massage",
    ),
    ServiceType.COMBO: ServiceConfig(
        catalog_path="/combos",
        id_field="comboId",
        price_field="comboPrice",
        tax_key="combo",
    ),
    ServiceType.BAKERY: ServiceConfig(
        catalog_path="/bakery-items",
        id_field="itemId",
        booking_path="/bakery-orders",
        tax_key="bakery",
    ),
    ServiceType.BAR: ServiceConfig(
        catalog_path="/menu",
        id_field="itemId",
        booking_path="/restaurant-orders",
        tax_key="bar",
        categories=frozenset({
            "whiskey",
            "brandy",
            "beer",
            "wine",
            "cocktails",
            "vodka",
            "gin",
            "rum",
            "snacks",
            "kitchen",
        }),
    ),
    ServiceType.JUICE_BAR: ServiceConfig(
        catalog_path="/juice-items",
        id_field="itemId",
        booking_path="/juice-orders",
        tax_key="juice",
    ),
    ServiceType.THEATER: ServiceConfig(tax_key="theater"),
    ServiceType.ROOMS: ServiceConfig(tax_key="rooms"),
    ServiceType.FUNCTION_HALL: ServiceConfig(tax_key="functionHall"),
}

# Labels of the services a combo can bundle, keyed as the backend stores them.
_COMBO_SERVICE_LABELS = {
    "games": "Games",
    "pool": "Swimming Pool",
    "massage": "Massage",
    "theater": "Theater",
    "rooms": "Rooms",
    "functionHall": "Function Hall",
}


def _first(raw: dict[str, Any], *keys: str, default: Any = None) -> Any:
  for key in keys:
    value = raw.get(key)
    if value is not None:
      return value
  return default


def _combo_components(raw: dict[str, Any]) -> tuple[SubItemRef, ...]:
  components = []
  for service_id, group in (raw.get("items") or {}).items():
    for sub in (group or {}).get("items", []):
      components.append(
          SubItemRef(
              service=_COMBO_SERVICE_LABELS.get(service_id, service_id),
              name=sub.get("name", ""),
              price=_first(sub, "rate", "price", "comboPrice", default=0),
              item_id=_first(sub, "id", "gameId", "typeId", "itemId"),
          )
      )
  return tuple(components)


def parse_catalog_item(
    raw: dict[str, Any], config: ServiceConfig
) -> CatalogItem:
  """Converts one backend catalog entry into a CatalogItem."""
  return CatalogItem(
      id=_first(raw, config.id_field, "id", "_id"),
      display_name=raw.get("name", ""),
      unit_price=_first(raw, config.price_field),
      category=_first(raw, "category", "type"),
      available=bool(_first(raw, "isActive", "available", default=True)),
      components=_combo_components(raw),
  )


def _wire_amount(value: Decimal) -> int | float:
  if value == value.to_integral_value():
    return int(value)
  return float(value)


def wire_payload(record: BookingRecord) -> dict[str, Any]:
  """Serializes a booking record into the backend's JSON shape."""
  return {
      "customerId": record.customer.customer_id,
      "customerName": record.customer.name,
      "customerMobile": record.customer.mobile,
      "service": record.service.value,
      "items": [
          {
              "itemId": item.item_id,
              "name": item.name,
              "quantity": item.quantity,
              "price": _wire_amount(item.unit_price),
              "subtotal": _wire_amount(item.subtotal),
              "components": [
                  {
                      "service": c.service,
                      "itemName": c.name,
                      "price": _wire_amount(c.price),
                  }
                  for c in item.components
              ],
          }
          for item in record.items
      ],
      "totalUnits": record.total_units,
      "subtotal": _wire_amount(record.tax.subtotal),
      "taxPercent": _wire_amount(record.tax.tax_percent),
      "taxAmount": _wire_amount(record.tax.tax_amount),
      "totalAmount": _wire_amount(record.tax.total),
      "paymentMethod": record.payment_method.value,
      "paymentReference": record.payment_reference,
      "notes": record.notes,
      "idempotencyToken": record.idempotency_token,
      "createdAt": record.created_at.isoformat(),
  }


def _error_message(response: httpx.Response) -> str:
  try:
    body = response.json()
  except ValueError:
    body = None
  if isinstance(body, dict) and body.get("error"):
    return str(body["error"])
  return f"HTTP {response.status_code}"


class BackendClient:
  """Async client for the resort backend."""

  def __init__(
      self,
      base_url: str,
      timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
      transport: Optional[httpx.AsyncBaseTransport] = None,
      static_data: Optional[dict[str, Any]] = None,
  ):
    self._client = httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
        transport=transport,
        headers={"Content-Type": "application/json"},
    )
    self._static_data = static_data

  async def aclose(self) -> None:
    await self._client.aclose()

  async def _request(
      self,
      method: str,
      path: str,
      error_cls: type[BookingError],
      **kwargs: Any,
  ) -> httpx.Response:
    try:
      response = await self._client.request(method, path, **kwargs)
    except httpx.HTTPError as e:
      logger.warning("%s %s failed: %s", method, path, e)
      raise error_cls(f"Could not reach the server: {e}") from e
    return response

  def _json(
      self, response: httpx.Response, error_cls: type[BookingError]
  ) -> Any:
    if response.is_error:
      message = _error_message(response)
      logger.warning(
          "%s %s returned %d: %s",
          response.request.method,
          response.request.url.path,
          response.status_code,
          message,
      )
      raise error_cls(message)
    try:
      return response.json()
    except ValueError as e:
      raise error_cls("Server returned a malformed response") from e

  async def fetch_catalog(self, service: ServiceType) -> CatalogSnapshot:
    """Fetches the current catalog of a service.

    Raises:
      SyncFailureError: If the backend is unreachable or answers with an
        error or an unusable catalog.
    """
    config = SERVICE_CONFIGS[service]
    if config.catalog_path is None:
      try:
        return static_catalog.static_snapshot(service, self._static_data)
      except (OSError, ValueError) as e:
        raise SyncFailureError(
            f"Could not load {service.value} catalog"
        ) from e

    response = await self._request(
        "GET", config.catalog_path, SyncFailureError
    )
    body = self._json(response, SyncFailureError)
    if not isinstance(body, list):
      raise SyncFailureError(f"Unexpected {service.value} catalog format")

    items = []
    for raw in body:
      try:
        item = parse_catalog_item(raw, config)
      except (ValidationError, AttributeError) as e:
        logger.warning(
            "Skipping malformed %s item %r: %s", service.value, raw, e
        )
        continue
      if config.accepts(item):
        items.append(item)
    try:
      return CatalogSnapshot(items=tuple(items))
    except ValidationError as e:
      raise SyncFailureError(f"Invalid {service.value} catalog: {e}") from e

  async def fetch_tax_rate(self, service: ServiceType) -> Decimal:
    """Fetches the tax percentage of a service; an unset rate is 0."""
    path = f"/settings/tax/{SERVICE_CONFIGS[service].tax_key}"
    response = await self._request("GET", path, SyncFailureError)
    if response.status_code == 404:
      return Decimal(0)
    body = self._json(response, SyncFailureError)
    value = body.get("taxPercent") if isinstance(body, dict) else None
    if value is None:
      return Decimal(0)
    try:
      return tax_engine.parse_tax_percent(str(value))
    except InvalidArgumentError as e:
      raise SyncFailureError(e.message) from e

  async def persist_booking(self, record: BookingRecord) -> PersistResult:
    """Saves a booking, keyed by its idempotency token.

    Raises:
      CommitFailureError: If the booking could not be saved.
    """
    path = SERVICE_CONFIGS[record.service].booking_path
    response = await self._request(
        "POST",
        path,
        CommitFailureError,
        json=wire_payload(record),
        headers={IDEMPOTENCY_KEY_HEADER: record.idempotency_token},
    )
    body = self._json(response, CommitFailureError)
    try:
      return PersistResult.model_validate(body)
    except ValidationError as e:
      raise CommitFailureError("Server did not return a booking id") from e

  async def search_customers(self, query: str) -> list[CustomerRef]:
    """Searches customers by name or mobile.

    Queries shorter than two characters return no results without a request.
    """
    query = (query or "").strip()
    if len(query) < MIN_CUSTOMER_QUERY_LENGTH:
      return []
    response = await self._request(
        "GET", "/customers/search", SyncFailureError, params={"q": query}
    )
    body = self._json(response, SyncFailureError)
    if not isinstance(body, list):
      raise SyncFailureError("Unexpected customer search format")
    customers = []
    for raw in body:
      try:
        customers.append(CustomerRef.model_validate(raw))
      except ValidationError as e:
        logger.warning("Skipping malformed customer %r: %s", raw, e)
    return customers
