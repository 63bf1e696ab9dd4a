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

"""Resort front-desk booking server (Python/FastAPI)."""

import logging
from typing import Sequence

from absl import app as absl_app
from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
import uvicorn

from . import config
from .exceptions import BookingError
from .routes.customers import router as customers_router
from .routes.sessions import router as sessions_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Resort POS Booking Service",
    version="0.1.0",
    description="Booking sessions for the resort front desk",
    lifespan=config.lifespan,
)


@app.exception_handler(BookingError)
async def booking_exception_handler(request: Request, exc: BookingError):
  """Converts booking errors to JSON responses."""
  del request  # Unused.
  return JSONResponse(
      status_code=exc.status_code,
      content={"detail": exc.message, "code": exc.code},
  )


app.include_router(sessions_router)
app.include_router(customers_router)


def main(argv: Sequence[str]) -> None:
  """Main entry point for the booking server."""
  del argv  # Unused.
  logging.basicConfig(level=logging.INFO)
  uvicorn.run(app, host="0.0.0.0", port=config.FLAGS.port)


def run() -> None:
  absl_app.run(main)


if __name__ == "__main__":
  run()
