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

"""FastAPI dependencies for the front-desk server.

The backend client and the session registry are created by the app lifespan
(see `config.lifespan`) and read from the application state, so tests can
replace either one with `app.dependency_overrides`.
"""

from fastapi import Depends
from fastapi import Path
from fastapi import Request

from .backend import BackendClient
from .registry import SessionRegistry
from .session import BookingSession


def get_backend(request: Request) -> BackendClient:
  """Dependency provider for the backend client."""
  return request.app.state.backend


def get_registry(request: Request) -> SessionRegistry:
  """Dependency provider for the session registry."""
  return request.app.state.registry


def get_session(
    session_id: str = Path(..., alias="id"),
    registry: SessionRegistry = Depends(get_registry),
) -> BookingSession:
  """Resolves the session named in the path.

  Raises:
    SessionNotFoundError: If the session does not exist.
  """
  return registry.get(session_id)
