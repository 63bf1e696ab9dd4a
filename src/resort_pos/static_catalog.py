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

"""Fixed catalogs for services that have no remote catalog endpoint.

Theater shows, rooms and function halls are sold from data bundled with the
package (`data/static_catalogs.json`). Each is flattened into catalog items so
that the same ledger and checkout flow serve every screen:

- Theater: one item per show and seat category, e.g. `show_1:premium`, priced
  at the show price times the category multiplier.
- Rooms: one item per room, priced per day.
- Function halls: one item per hall and booking unit, `hall_1:hour` and
  `hall_1:day`.
"""

from decimal import Decimal
from decimal import ROUND_HALF_UP
import json
import os
from typing import Any, Optional

from .enums import ServiceType
from .exceptions import InvalidArgumentError
from .models import CatalogItem
from .models import CatalogSnapshot

_DEFAULT_PATH = os.path.join(
    os.path.dirname(__file__), "data", "static_catalogs.json"
)

STATIC_SERVICES = (
    ServiceType.THEATER,
    ServiceType.ROOMS,
    ServiceType.FUNCTION_HALL,
)


def load_static_data(path: Optional[str] = None) -> dict[str, Any]:
  """Reads the bundled (or an overriding) static catalog file."""
  with open(path or _DEFAULT_PATH, "r") as f:
    return json.load(f)


def _money(value: Any) -> Decimal:
  return Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP)


def _theater_items(data: dict[str, Any]) -> list[CatalogItem]:
  items = []
  theater = data.get("theater", {})
  categories = theater.get("seatCategories", [])
  for show in theater.get("shows", []):
    sold_out = int(show.get("seatsAvailable", 0)) <= 0
    for category in categories:
      items.append(
          CatalogItem(
              id=f"{show['id']}:{category['id']}",
              display_name=f"{show['name']} ({category['name']})",
              unit_price=_money(
                  Decimal(str(show["price"]))
                  * Decimal(str(category["multiplier"]))
              ),
              category=show.get("time"),
              available=not sold_out,
          )
      )
  return items


def _room_items(data: dict[str, Any]) -> list[CatalogItem]:
  return [
      CatalogItem(
          id=room["id"],
          display_name=room["name"],
          unit_price=_money(room["pricePerDay"]),
          category=room.get("type"),
          available=room.get("available", True),
      )
      for room in data.get("rooms", [])
  ]


def _hall_items(data: dict[str, Any]) -> list[CatalogItem]:
  items = []
  for hall in data.get("functionHalls", []):
    for unit, field in (("hour", "pricePerHour"), ("day", "pricePerDay")):
      items.append(
          CatalogItem(
              id=f"{hall['id']}:{unit}",
              display_name=f"{hall['name']} (per {unit})",
              unit_price=_money(hall[field]),
              category=unit,
              available=hall.get("available", True),
          )
      )
  return items


_BUILDERS = {
    ServiceType.THEATER: _theater_items,
    ServiceType.ROOMS: _room_items,
    ServiceType.FUNCTION_HALL: _hall_items,
}


def static_snapshot(
    service: ServiceType, data: Optional[dict[str, Any]] = None
) -> CatalogSnapshot:
  """Builds the catalog snapshot of a static service.

  Raises:
    InvalidArgumentError: If the service has a remote catalog instead.
  """
  builder = _BUILDERS.get(service)
  if builder is None:
    raise InvalidArgumentError(f"{service.value} has no static catalog")
  if data is None:
    data = load_static_data()
  return CatalogSnapshot(items=tuple(builder(data)))
