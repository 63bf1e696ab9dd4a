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

"""The selection ledger: the in-memory cart of one booking session.

The ledger only records quantities (and, for combos, the chosen sub-items).
Prices are read from the catalog each time a snapshot is taken so that a
price edited on the backend shows up in the totals until checkout freezes
them.
"""

import logging
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional

from .exceptions import ItemUnavailableError
from .exceptions import UnknownItemError
from .models import CatalogItem
from .models import LedgerLine
from .models import LedgerSnapshot
from .models import SelectionEntry
from .models import SubItemRef

logger = logging.getLogger(__name__)

PriceLookup = Callable[[str], Optional[CatalogItem]]


class SelectionLedger:
  """Insertion-ordered map from catalog item id to selected quantity."""

  def __init__(self) -> None:
    self._entries: dict[str, SelectionEntry] = {}

  def __len__(self) -> int:
    return len(self._entries)

  def __contains__(self, item_id: object) -> bool:
    return str(item_id) in self._entries

  def __iter__(self) -> Iterator[SelectionEntry]:
    return iter(list(self._entries.values()))

  @property
  def is_empty(self) -> bool:
    return not self._entries

  def quantity(self, item_id: str | int) -> int:
    entry = self._entries.get(str(item_id))
    return entry.quantity if entry else 0

  def increment(
      self,
      item_id: str | int,
      price_lookup: PriceLookup,
      sub_items: Optional[Iterable[SubItemRef]] = None,
  ) -> SelectionEntry:
    """Adds one unit of an item.

    Args:
      item_id: Id of the catalog item.
      price_lookup: Resolves an id against the current catalog.
      sub_items: Chosen constituents for a multi-line item. Defaults to the
        catalog item's own components on first add.

    Returns:
      The updated entry.

    Raises:
      UnknownItemError: If the id is not in the current catalog.
      ItemUnavailableError: If the item is marked unavailable.
    """
    key = str(item_id)
    item = price_lookup(key)
    if item is None:
      raise UnknownItemError(f"Item {key} is not in the current catalog")
    if not item.available:
      raise ItemUnavailableError(f"Item {key} is not available for sale")

    existing = self._entries.get(key)
    chosen = tuple(sub_items) if sub_items is not None else None
    if existing is None:
      entry = SelectionEntry(
          item_id=key,
          display_name=item.display_name,
          quantity=1,
          last_seen_price=item.unit_price,
          sub_items=chosen if chosen is not None else item.components,
      )
    else:
      entry = existing.model_copy(
          update={
              "quantity": existing.quantity + 1,
              "display_name": item.display_name,
              "last_seen_price": item.unit_price,
              "sub_items": (
                  chosen if chosen is not None else existing.sub_items
              ),
          }
      )
    self._entries[key] = entry
    return entry

  def decrement(self, item_id: str | int) -> Optional[SelectionEntry]:
    """Removes one unit; a no-op when the item is not selected.

    Returns:
      The updated entry, or None if the item is no longer selected.
    """
    key = str(item_id)
    existing = self._entries.get(key)
    if existing is None:
      return None
    if existing.quantity <= 1:
      del self._entries[key]
      return None
    entry = existing.model_copy(update={"quantity": existing.quantity - 1})
    self._entries[key] = entry
    return entry

  def clear(self) -> None:
    self._entries.clear()

  def snapshot(self, price_lookup: PriceLookup) -> LedgerSnapshot:
    """Prices the current selection against the current catalog.

    An item that has disappeared from the catalog since it was selected is
    priced at the last price seen for it.
    """
    lines = []
    total_units = 0
    subtotal = Decimal(0)
    for entry in self._entries.values():
      item = price_lookup(entry.item_id)
      if item is not None:
        unit_price = item.unit_price
        name = item.display_name
      else:
        logger.debug(
            "Item %s left the catalog; using last seen price", entry.item_id
        )
        unit_price = entry.last_seen_price
        name = entry.display_name
      line_subtotal = unit_price * entry.quantity
      lines.append(
          LedgerLine(
              item_id=entry.item_id,
              display_name=name,
              quantity=entry.quantity,
              unit_price=unit_price,
              subtotal=line_subtotal,
              sub_items=entry.sub_items,
          )
      )
      total_units += entry.quantity
      subtotal += line_subtotal
    return LedgerSnapshot(
        entries=tuple(lines), total_units=total_units, subtotal=subtotal
    )
