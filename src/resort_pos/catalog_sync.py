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

"""Periodic synchronization of a displayed catalog with a remote source.

`CatalogSync` polls an injected fetcher. Consecutive snapshots with the same
fingerprint (same ids, same count, same order) are not re-delivered, so a
screen is only re-rendered when the catalog content actually changed. The most
recent snapshot is still kept in `latest`, which is what price lookups read.

The first fetch of a run holds the sync in a loading state for at least
`min_loading` seconds. Failures before any snapshot has been delivered are
reported through `on_error`; later failures are logged and retried on the next
tick. Responses that arrive after `stop()`, or after a newer response has been
applied, are discarded.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from .constants import DEFAULT_MIN_LOADING_SECONDS
from .exceptions import InvalidArgumentError
from .exceptions import SyncFailureError
from .models import CatalogSnapshot

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[CatalogSnapshot]]
SnapshotCallback = Callable[[CatalogSnapshot], None]
ErrorCallback = Callable[[SyncFailureError], None]


class CatalogSync:
  """Keeps one screen's catalog in step with the backend."""

  def __init__(
      self,
      min_loading: float = DEFAULT_MIN_LOADING_SECONDS,
      clock: Callable[[], float] = time.monotonic,
      sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
  ):
    if min_loading < 0:
      raise InvalidArgumentError("min_loading must be non-negative")
    self._min_loading = min_loading
    self._clock = clock
    self._sleep = sleep

    self._fetcher: Optional[Fetcher] = None
    self._on_snapshot: Optional[SnapshotCallback] = None
    self._on_fetched: Optional[SnapshotCallback] = None
    self._on_error: Optional[ErrorCallback] = None
    self._interval = 0.0
    self._task: Optional[asyncio.Task] = None

    # Bumped on every start/stop; results carrying an older epoch are dropped.
    self._epoch = 0
    self._started_generation = 0
    self._applied_generation = 0

    self._started_at: Optional[float] = None
    self._first_fetch_done = False
    self._delivered: Optional[CatalogSnapshot] = None
    self._latest: Optional[CatalogSnapshot] = None
    self._error: Optional[SyncFailureError] = None

  @property
  def running(self) -> bool:
    return self._task is not None and not self._task.done()

  @property
  def latest(self) -> Optional[CatalogSnapshot]:
    """The most recently fetched snapshot, delivered or not."""
    return self._latest

  @property
  def error(self) -> Optional[SyncFailureError]:
    """The failure shown to the user while no snapshot is available."""
    return self._error

  @property
  def loading(self) -> bool:
    """True until the first fetch finished and the loading floor elapsed."""
    if self._fetcher is None or self._started_at is None:
      return False
    if not self._first_fetch_done:
      return True
    return self._clock() - self._started_at < self._min_loading

  def start(
      self,
      fetcher: Fetcher,
      interval: float,
      on_snapshot: SnapshotCallback,
      on_error: Optional[ErrorCallback] = None,
      on_fetched: Optional[SnapshotCallback] = None,
  ) -> asyncio.Task:
    """Begins polling; must be called from a running event loop.

    Args:
      fetcher: Coroutine function returning a fresh snapshot. It signals
        failure by raising SyncFailureError.
      interval: Seconds between background fetches.
      on_snapshot: Called with each snapshot whose fingerprint changed.
      on_error: Called with the failure when no snapshot is available yet.
      on_fetched: Called with every accepted snapshot, changed or not, before
        on_snapshot. Stale responses and responses arriving after stop are
        never passed to it.

    Returns:
      The polling task.
    """
    if self.running:
      raise RuntimeError("CatalogSync is already running")
    if interval <= 0:
      raise InvalidArgumentError(f"interval must be positive, got {interval}")

    self._epoch += 1
    self._fetcher = fetcher
    self._on_snapshot = on_snapshot
    self._on_fetched = on_fetched
    self._on_error = on_error
    self._interval = interval
    self._started_at = self._clock()
    self._first_fetch_done = False
    self._delivered = None
    self._latest = None
    self._error = None
    self._task = asyncio.get_running_loop().create_task(
        self._run(self._epoch)
    )
    return self._task

  def stop(self) -> None:
    """Stops polling; no callback fires after this returns."""
    self._epoch += 1
    self._fetcher = None
    self._on_snapshot = None
    self._on_fetched = None
    self._on_error = None
    task, self._task = self._task, None
    if task is not None and not task.done():
      task.cancel()

  async def refresh(self) -> Optional[CatalogSnapshot]:
    """Performs one fetch now.

    Returns:
      The fetched snapshot, or None if the fetch failed or its result was
      discarded.
    """
    fetcher = self._fetcher
    if fetcher is None:
      raise RuntimeError("CatalogSync is not running")

    epoch = self._epoch
    self._started_generation += 1
    generation = self._started_generation

    try:
      snapshot = await fetcher()
    except SyncFailureError as e:
      self._apply_failure(epoch, generation, e)
      return None
    return self._apply_snapshot(epoch, generation, snapshot)

  def _is_current(self, epoch: int, generation: int) -> bool:
    if epoch != self._epoch:
      logger.debug("Discarding catalog response from a stopped sync")
      return False
    if generation < self._applied_generation:
      logger.debug(
          "Discarding stale catalog response %d (applied %d)",
          generation,
          self._applied_generation,
      )
      return False
    return True

  def _apply_failure(
      self, epoch: int, generation: int, error: SyncFailureError
  ) -> None:
    if not self._is_current(epoch, generation):
      return
    self._first_fetch_done = True
    if self._delivered is not None:
      logger.debug("Background catalog refresh failed: %s", error.message)
      return
    logger.error("Could not load catalog: %s", error.message)
    self._error = error
    if self._on_error is not None:
      self._on_error(error)

  def _apply_snapshot(
      self, epoch: int, generation: int, snapshot: CatalogSnapshot
  ) -> Optional[CatalogSnapshot]:
    if not self._is_current(epoch, generation):
      return None
    self._applied_generation = generation
    self._first_fetch_done = True
    self._latest = snapshot
    self._error = None
    if self._on_fetched is not None:
      self._on_fetched(snapshot)

    if (
        self._delivered is not None
        and self._delivered.fingerprint == snapshot.fingerprint
    ):
      logger.debug("Catalog unchanged (%d items)", len(snapshot.items))
      return snapshot

    self._delivered = snapshot
    if self._on_snapshot is not None:
      self._on_snapshot(snapshot)
    return snapshot

  async def _run(self, epoch: int) -> None:
    await self._tick()
    while epoch == self._epoch:
      await self._sleep(self._interval)
      if epoch != self._epoch:
        break
      await self._tick()

  async def _tick(self) -> None:
    try:
      await self.refresh()
    except asyncio.CancelledError:
      raise
    except Exception as e:  # pylint: disable=broad-exception-caught
      logger.exception("Catalog refresh raised unexpectedly: %s", e)
