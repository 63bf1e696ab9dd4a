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

"""Shared configuration and startup logic for the front-desk server."""

import asyncio
import contextlib
import logging
from typing import Optional

from absl import flags
from fastapi import FastAPI
from pydantic import BaseModel
from pydantic import Field

from .backend import BackendClient
from .constants import DEFAULT_CURRENCY
from .constants import DEFAULT_MAX_SESSIONS
from .constants import DEFAULT_MIN_LOADING_SECONDS
from .constants import DEFAULT_PAYEE_NAME
from .constants import DEFAULT_PAYEE_VPA
from .constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from .constants import DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS
from .constants import DEFAULT_SYNC_INTERVAL_SECONDS
from .registry import SessionRegistry
from .static_catalog import load_static_data

logger = logging.getLogger(__name__)

FLAGS = flags.FLAGS

DEFAULT_BACKEND_URL = "http://localhost:3000/api"


class Settings(BaseModel):
  """Runtime settings of booking sessions and the backend client."""

  backend_url: str = DEFAULT_BACKEND_URL
  request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SECONDS, gt=0)
  sync_interval: float = Field(default=DEFAULT_SYNC_INTERVAL_SECONDS, gt=0)
  min_loading: float = Field(default=DEFAULT_MIN_LOADING_SECONDS, ge=0)
  payee_vpa: str = DEFAULT_PAYEE_VPA
  payee_name: str = DEFAULT_PAYEE_NAME
  currency: str = DEFAULT_CURRENCY
  static_catalog_path: Optional[str] = None
  session_idle_timeout: float = Field(
      default=DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS, gt=0
  )
  max_sessions: int = Field(default=DEFAULT_MAX_SESSIONS, ge=1)


# Define flags only if they haven't been defined yet (to avoid duplicates
# during tests or re-imports)
try:
  flags.DEFINE_string("backend_url", DEFAULT_BACKEND_URL, "Backend API URL")
  flags.DEFINE_integer("port", 8182, "Port to run the server on")
  flags.DEFINE_float(
      "sync_interval",
      DEFAULT_SYNC_INTERVAL_SECONDS,
      "Seconds between catalog refreshes",
  )
  flags.DEFINE_float(
      "min_loading",
      DEFAULT_MIN_LOADING_SECONDS,
      "Minimum seconds a screen shows its loading state on first load",
  )
  flags.DEFINE_string(
      "payee_vpa", DEFAULT_PAYEE_VPA, "UPI id receiving payments"
  )
  flags.DEFINE_string("payee_name", DEFAULT_PAYEE_NAME, "UPI payee name")
  flags.DEFINE_string(
      "static_catalog_path", None, "JSON file overriding the static catalogs"
  )
  flags.DEFINE_float(
      "session_idle_timeout",
      DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS,
      "Seconds after which an unused session is stopped",
  )
  flags.DEFINE_integer(
      "max_sessions", DEFAULT_MAX_SESSIONS, "Maximum number of open sessions"
  )
except flags.DuplicateFlagError:
  pass


def settings_from_flags() -> Settings:
  """Builds Settings from the command line.

  Returns default settings when flags have not been parsed (e.g. under a test
  runner that imports the app directly).
  """
  if not FLAGS.is_parsed():
    return Settings()
  return Settings(
      backend_url=FLAGS.backend_url,
      sync_interval=FLAGS.sync_interval,
      min_loading=FLAGS.min_loading,
      payee_vpa=FLAGS.payee_vpa,
      payee_name=FLAGS.payee_name,
      static_catalog_path=FLAGS.static_catalog_path,
      session_idle_timeout=FLAGS.session_idle_timeout,
      max_sessions=FLAGS.max_sessions,
  )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
  """Owns the backend client and the session registry of the app."""
  settings = settings_from_flags()
  static_data = None
  if settings.static_catalog_path:
    static_data = load_static_data(settings.static_catalog_path)

  app.state.settings = settings
  app.state.backend = BackendClient(
      settings.backend_url,
      timeout=settings.request_timeout,
      static_data=static_data,
  )
  app.state.registry = SessionRegistry(settings)
  reaper = asyncio.create_task(app.state.registry.run_reaper())
  logger.info("Using backend at %s", settings.backend_url)
  yield
  reaper.cancel()
  with contextlib.suppress(asyncio.CancelledError):
    await reaper
  app.state.registry.stop_all()
  await app.state.backend.aclose()
