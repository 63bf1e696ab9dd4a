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

"""Customer lookup routes for the front-desk server."""

from typing import Any

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query

from .. import dependencies
from ..backend import BackendClient

router = APIRouter(prefix="/customers")


@router.get("/search", operation_id="search_customers")
async def search_customers(
    q: str = Query(""),
    backend: BackendClient = Depends(dependencies.get_backend),
) -> list[dict[str, Any]]:
  """Search customers by name or mobile (at least two characters)."""
  customers = await backend.search_customers(q)
  return [customer.model_dump() for customer in customers]
