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

"""Tests for the session registry."""

import asyncio

from absl.testing import absltest

from .config import Settings
from .enums import CheckoutState
from .enums import PaymentMethod
from .enums import ServiceType
from .exceptions import SessionNotFoundError
from .registry import SessionRegistry
from .testing import FakeBackend
from .testing import make_item


async def _settle():
  for _ in range(10):
    await asyncio.sleep(0)


class FakeClock:

  def __init__(self, now=0.0):
    self.now = now

  def __call__(self):
    return self.now


class SessionRegistryTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.clock = FakeClock()
    self.backend = FakeBackend(items=[make_item("A", 100)])
    self.registry = SessionRegistry(
        Settings(
            sync_interval=3600,
            min_loading=0,
            session_idle_timeout=100,
            max_sessions=3,
        ),
        clock=self.clock,
    )

  def create(self):
    return self.registry.create(ServiceType.GAMES, self.backend)

  def test_create_get_remove(self):
    async def run():
      session = self.create()
      self.assertIs(self.registry.get(session.id), session)
      self.assertTrue(session.sync.running)

      self.registry.remove(session.id)
      self.assertFalse(session.sync.running)
      self.assertEmpty(self.registry)
      with self.assertRaises(SessionNotFoundError):
        self.registry.get(session.id)

    asyncio.run(run())

  def test_idle_sessions_are_stopped(self):
    async def run():
      idle = self.create()
      active = self.create()
      self.clock.now = 60
      self.registry.get(active.id)
      self.clock.now = 120

      self.assertEqual(self.registry.evict_idle(), [idle.id])
      self.assertFalse(idle.sync.running)
      self.assertNotIn(idle.id, self.registry)
      self.assertTrue(active.sync.running)
      self.registry.stop_all()

    asyncio.run(run())

  def test_least_recently_used_session_makes_room(self):
    async def run():
      first, second, third = self.create(), self.create(), self.create()
      self.clock.now = 10
      self.registry.get(first.id)

      fourth = self.create()

      self.assertLen(self.registry, 3)
      self.assertNotIn(second.id, self.registry)
      self.assertFalse(second.sync.running)
      for session in (first, third, fourth):
        self.assertIn(session.id, self.registry)
      self.registry.stop_all()

    asyncio.run(run())

  def test_session_saving_a_booking_is_kept(self):
    async def run():
      session = self.create()
      await _settle()
      session.increment("A")
      session.proceed_to_checkout()
      session.choose_payment_method(PaymentMethod.CASH)
      self.backend.persist_gate = asyncio.Event()
      commit = asyncio.create_task(session.commit())
      await _settle()
      self.assertEqual(session.flow.state, CheckoutState.COMMITTING)

      self.clock.now = 500
      self.assertEqual(self.registry.evict_idle(), [])

      self.backend.persist_gate.set()
      await commit
      self.assertEqual(self.registry.evict_idle(), [session.id])

    asyncio.run(run())

  def test_reaper_evicts_in_the_background(self):
    async def run():
      releases = []

      async def sleep(seconds):
        releases.append(seconds)
        await asyncio.sleep(0)

      registry = SessionRegistry(
          Settings(sync_interval=3600, min_loading=0, session_idle_timeout=30),
          clock=self.clock,
          sleep=sleep,
      )
      session = registry.create(ServiceType.GAMES, self.backend)
      self.clock.now = 31
      reaper = asyncio.create_task(registry.run_reaper())
      await _settle()

      self.assertNotIn(session.id, registry)
      self.assertFalse(session.sync.running)
      self.assertEqual(releases[0], 30)
      reaper.cancel()
      with self.assertRaises(asyncio.CancelledError):
        await reaper

    asyncio.run(run())


if __name__ == "__main__":
  absltest.main()
