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

"""In-memory registry of the booking sessions served by one process.

Sessions left unused for longer than the idle timeout are stopped and removed,
and the registry never holds more than `max_sessions` sessions: creating one
more evicts the least recently used. A session whose booking is being saved is
never evicted.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from .catalog_sync import CatalogSync
from .constants import SESSION_REAP_INTERVAL_SECONDS
from .enums import CheckoutState
from .enums import ServiceType
from .exceptions import SessionNotFoundError
from .payment import Payee
from .session import Backend
from .session import BookingSession

logger = logging.getLogger(__name__)


class SessionRegistry:
  """Creates, tracks and stops booking sessions.

  Args:
    settings: A `config.Settings` used for every session created.
    clock: Monotonic clock used for idle tracking.
    sleep: Sleep used between idle sweeps.
  """

  def __init__(
      self,
      settings,
      clock: Callable[[], float] = time.monotonic,
      sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
  ):
    self._settings = settings
    self._clock = clock
    self._sleep = sleep
    self._sessions: dict[str, BookingSession] = {}
    self._last_used: dict[str, float] = {}

  def __len__(self) -> int:
    return len(self._sessions)

  def __contains__(self, session_id: str) -> bool:
    return session_id in self._sessions

  def create(
      self, service: ServiceType | str, backend: Backend
  ) -> BookingSession:
    """Creates and starts a session; must be called from the event loop."""
    settings = self._settings
    session = BookingSession(
        service,
        backend,
        sync_interval=settings.sync_interval,
        payee=Payee(
            vpa=settings.payee_vpa,
            name=settings.payee_name,
            currency=settings.currency,
        ),
        sync=CatalogSync(min_loading=settings.min_loading),
    )
    self.evict_idle()
    self._make_room()
    session.start()
    self._sessions[session.id] = session
    self._last_used[session.id] = self._clock()
    return session

  def get(self, session_id: str) -> BookingSession:
    session = self._sessions.get(session_id)
    if session is None:
      raise SessionNotFoundError(f"Session {session_id} not found")
    self._last_used[session_id] = self._clock()
    return session

  def remove(self, session_id: str) -> None:
    self.get(session_id)
    self._discard(session_id)

  def _discard(self, session_id: str) -> None:
    session = self._sessions.pop(session_id)
    del self._last_used[session_id]
    session.stop()

  def _evictable(self, session_id: str) -> bool:
    return self._sessions[session_id].flow.state != CheckoutState.COMMITTING

  def evict_idle(self) -> list[str]:
    """Stops and removes sessions idle for longer than the idle timeout."""
    cutoff = self._clock() - self._settings.session_idle_timeout
    idle = [
        session_id
        for session_id, last_used in self._last_used.items()
        if last_used <= cutoff and self._evictable(session_id)
    ]
    for session_id in idle:
      logger.info("Evicting idle session %s", session_id)
      self._discard(session_id)
    return idle

  def _make_room(self) -> None:
    while len(self._sessions) >= self._settings.max_sessions:
      candidates = [s for s in self._last_used if self._evictable(s)]
      if not candidates:
        logger.warning(
            "All %d sessions are saving bookings; exceeding the limit",
            len(self._sessions),
        )
        return
      oldest = min(candidates, key=self._last_used.__getitem__)
      logger.info("Evicting least recently used session %s", oldest)
      self._discard(oldest)

  async def run_reaper(self) -> None:
    """Evicts idle sessions periodically until cancelled."""
    interval = min(
        self._settings.session_idle_timeout, SESSION_REAP_INTERVAL_SECONDS
    )
    while True:
      await self._sleep(interval)
      self.evict_idle()

  def stop_all(self) -> None:
    for session in self._sessions.values():
      session.stop()
    self._sessions.clear()
    self._last_used.clear()
