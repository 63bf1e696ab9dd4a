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

"""Tests for the backend HTTP client."""

import asyncio
from decimal import Decimal
import json

from absl.testing import absltest
import httpx

from . import tax_engine
from .backend import BackendClient
from .backend import wire_payload
from .enums import PaymentMethod
from .enums import ServiceType
from .exceptions import CommitFailureError
from .exceptions import SyncFailureError
from .models import BookingLineItem
from .models import BookingRecord
from .models import CustomerRef


def _record(service=ServiceType.POOL, **kwargs):
  fields = {
      "customer": CustomerRef(customer_id="c1", name="Asha", mobile="90000"),
      "service": service,
      "items": (
          BookingLineItem(
              item_id="adult",
              name="Adult",
              quantity=2,
              unit_price=Decimal(150),
              subtotal=Decimal(300),
          ),
      ),
      "tax": tax_engine.compute(300, Decimal("2.5")),
      "total_units": 2,
      "payment_method": PaymentMethod.CASH,
      "notes": "4 PM",
      "idempotency_token": "tok-1",
  }
  fields.update(kwargs)
  return BookingRecord(**fields)


class BackendClientTest(absltest.TestCase):

  def setUp(self):
    super().setUp()
    self.requests = []
    self.responses = {}

  def handler(self, request: httpx.Request) -> httpx.Response:
    self.requests.append(request)
    response = self.responses.get(request.url.path)
    if response is None:
      return httpx.Response(404, json={"error": "Not found"})
    if isinstance(response, Exception):
      raise response
    return response

  def call(self, method, *args):
    async def run():
      client = BackendClient(
          "http://backend.test/api", transport=httpx.MockTransport(self.handler)
      )
      try:
        return await getattr(client, method)(*args)
      finally:
        await client.aclose()

    return asyncio.run(run())

  def test_fetch_games_catalog(self):
    self.responses["/api/games"] = httpx.Response(
        200,
        json=[
            {"gameId": "g1", "name": "Bowling", "rate": 100},
            {"gameId": 2, "name": "Carrom", "rate": 50, "isActive": False},
            {"name": "No id", "rate": 10},
        ],
    )

    snapshot = self.call("fetch_catalog", ServiceType.GAMES)

    self.assertEqual(snapshot.fingerprint, ("g1", "2"))
    self.assertEqual(snapshot.lookup("g1").unit_price, Decimal(100))
    self.assertEqual(snapshot.lookup("g1").display_name, "Bowling")
    self.assertFalse(snapshot.lookup(2).available)

  def test_item_without_price_is_skipped(self):
    self.responses["/api/games"] = httpx.Response(
        200,
        json=[
            {"gameId": "g1", "name": "Bowling", "rate": 100},
            {"gameId": "g2", "name": "Darts"},
            {"gameId": "g3", "name": "Snooker", "rate": None},
        ],
    )

    snapshot = self.call("fetch_catalog", ServiceType.GAMES)

    self.assertEqual(snapshot.fingerprint, ("g1",))
    self.assertIsNone(snapshot.lookup("g2"))

  def test_fetch_bakery_catalog_and_orders(self):
    self.responses["/api/bakery-items"] = httpx.Response(
        200,
        json=[
            {"itemId": "bk1", "name": "Puff", "price": 25, "category": "veg"},
            {"itemId": "bk2", "name": "Cake", "price": 400},
        ],
    )
    self.responses["/api/bakery-orders"] = httpx.Response(
        201, json={"_id": "bo1"}
    )

    snapshot = self.call("fetch_catalog", ServiceType.BAKERY)
    result = self.call("persist_booking", _record(ServiceType.BAKERY))

    self.assertEqual(snapshot.fingerprint, ("bk1", "bk2"))
    self.assertEqual(snapshot.lookup("bk1").category, "veg")
    self.assertEqual(result.booking_id, "bo1")
    body = json.loads(self.requests[-1].content)
    self.assertEqual(body["service"], "Bakery")

  def test_bar_reads_only_bar_categories_of_the_menu(self):
    self.responses["/api/menu"] = httpx.Response(
        200,
        json=[
            {"itemId": "m1", "name": "Lager", "price": 220, "category": "Beer"},
            {"itemId": "m2", "name": "Dosa", "price": 80, "category": "tiffin"},
            {"itemId": "m3", "name": "Mojito", "price": 300,
             "category": "cocktails"},
            {"itemId": "m4", "name": "Soup", "price": 90},
        ],
    )
    self.responses["/api/settings/tax/bar"] = httpx.Response(
        200, json={"taxPercent": 18}
    )
    self.responses["/api/restaurant-orders"] = httpx.Response(
        201, json={"_id": "r1"}
    )

    snapshot = self.call("fetch_catalog", ServiceType.BAR)
    tax = self.call("fetch_tax_rate", ServiceType.BAR)
    result = self.call("persist_booking", _record(ServiceType.BAR))

    self.assertEqual(snapshot.fingerprint, ("m1", "m3"))
    self.assertEqual(tax, Decimal(18))
    self.assertEqual(result.booking_id, "r1")

  def test_fetch_juice_bar_catalog_and_orders(self):
    self.responses["/api/juice-items"] = httpx.Response(
        200, json=[{"itemId": "j1", "name": "Mango Shake", "price": 90}]
    )
    self.responses["/api/settings/tax/juice"] = httpx.Response(
        200, json={"taxPercent": 5}
    )
    self.responses["/api/juice-orders"] = httpx.Response(
        201, json={"_id": "jo1"}
    )

    snapshot = self.call("fetch_catalog", ServiceType.JUICE_BAR)
    tax = self.call("fetch_tax_rate", ServiceType.JUICE_BAR)
    result = self.call("persist_booking", _record(ServiceType.JUICE_BAR))

    self.assertEqual(snapshot.lookup("j1").unit_price, Decimal(90))
    self.assertEqual(tax, Decimal(5))
    self.assertEqual(result.booking_id, "jo1")
    self.assertEqual(self.requests[-1].url.path, "/api/juice-orders")

  def test_fetch_combo_components(self):
    self.responses["/api/combos"] = httpx.Response(
        200,
        json=[{
            "comboId": "k1",
            "name": "Family Fun",
            "comboPrice": 450,
            "items": {
                "games": {
                    "items": [{"id": "g1", "name": "Bowling", "rate": 100}]
                },
                "pool": {
                    "items": [{"typeId": "t1", "name": "Kids", "price": 80}]
                },
            },
        }],
    )

    item = self.call("fetch_catalog", ServiceType.COMBO).lookup("k1")

    self.assertEqual(item.unit_price, Decimal(450))
    self.assertTrue(item.is_multi_line)
    self.assertEqual(
        [(c.service, c.name, c.price, c.item_id) for c in item.components],
        [
            ("Games", "Bowling", Decimal(100), "g1"),
            ("Swimming Pool", "Kids", Decimal(80), "t1"),
        ],
    )

  def test_catalog_error_body_becomes_sync_failure(self):
    self.responses["/api/pool-types"] = httpx.Response(
        500, json={"error": "Database unavailable"}
    )
    with self.assertRaises(SyncFailureError) as cm:
      self.call("fetch_catalog", ServiceType.POOL)
    self.assertEqual(cm.exception.message, "Database unavailable")

  def test_unreachable_backend_becomes_sync_failure(self):
    self.responses["/api/massage-items"] = httpx.ConnectError("refused")
    with self.assertRaises(SyncFailureError):
      self.call("fetch_catalog", ServiceType.MASSAGE)

  def test_unexpected_catalog_shape(self):
    self.responses["/api/games"] = httpx.Response(200, json={"games": []})
    with self.assertRaises(SyncFailureError):
      self.call("fetch_catalog", ServiceType.GAMES)

  def test_static_catalog_needs_no_request(self):
    snapshot = self.call("fetch_catalog", ServiceType.ROOMS)
    self.assertIsNotNone(snapshot.lookup("room_1"))
    self.assertEqual(self.requests, [])

  def test_fetch_tax_rate(self):
    self.responses["/api/settings/tax/games"] = httpx.Response(
        200, json={"taxPercent": 18}
    )
    self.assertEqual(
        self.call("fetch_tax_rate", ServiceType.GAMES), Decimal(18)
    )

  def test_absent_tax_rate_is_zero(self):
    self.responses["/api/settings/tax/pool"] = httpx.Response(200, json={})
    self.assertEqual(self.call("fetch_tax_rate", ServiceType.POOL), Decimal(0))
    self.assertEqual(
        self.call("fetch_tax_rate", ServiceType.FUNCTION_HALL), Decimal(0)
    )
    self.assertEqual(
        self.requests[-1].url.path, "/api/settings/tax/functionHall"
    )

  def test_invalid_tax_rate(self):
    self.responses["/api/settings/tax/rooms"] = httpx.Response(
        200, json={"taxPercent": "lots"}
    )
    with self.assertRaises(SyncFailureError):
      self.call("fetch_tax_rate", ServiceType.ROOMS)

  def test_persist_booking(self):
    self.responses["/api/pool-orders"] = httpx.Response(
        201, json={"bookingId": 12, "status": "ok"}
    )

    result = self.call("persist_booking", _record())

    self.assertEqual(result.booking_id, "12")
    request = self.requests[0]
    self.assertEqual(request.method, "POST")
    self.assertEqual(request.headers["Idempotency-Key"], "tok-1")
    body = json.loads(request.content)
    self.assertEqual(body["customerId"], "c1")
    self.assertEqual(body["service"], "Pool")
    self.assertEqual(body["subtotal"], 300)
    self.assertEqual(body["taxPercent"], 2.5)
    self.assertEqual(body["taxAmount"], 8)
    self.assertEqual(body["totalAmount"], 308)
    self.assertEqual(body["paymentMethod"], "Cash")
    self.assertEqual(body["notes"], "4 PM")
    self.assertEqual(body["items"][0]["quantity"], 2)

  def test_games_bookings_use_bookings_endpoint(self):
    self.responses["/api/bookings"] = httpx.Response(200, json={"_id": "b9"})
    result = self.call("persist_booking", _record(ServiceType.GAMES))
    self.assertEqual(result.booking_id, "b9")

  def test_persist_failure_becomes_commit_failure(self):
    self.responses["/api/massage-orders"] = httpx.Response(
        400, json={"error": "Customer not found"}
    )
    with self.assertRaises(CommitFailureError) as cm:
      self.call("persist_booking", _record(ServiceType.MASSAGE))
    self.assertEqual(cm.exception.message, "Customer not found")

  def test_persist_without_booking_id(self):
    self.responses["/api/pool-orders"] = httpx.Response(200, json={})
    with self.assertRaises(CommitFailureError):
      self.call("persist_booking", _record())

  def test_wire_payload_keeps_fractions(self):
    record = _record(
        tax=tax_engine.compute(Decimal("99.50"), 0),
    )
    self.assertEqual(wire_payload(record)["totalAmount"], 99.5)

  def test_search_customers(self):
    self.responses["/api/customers/search"] = httpx.Response(
        200,
        json=[
            {"customerId": 5, "name": "Asha", "mobile": "9000000001"},
            {"id": "c7", "name": "Ashok", "mobile": None},
        ],
    )

    customers = self.call("search_customers", "  ash ")

    self.assertEqual(self.requests[0].url.params["q"], "ash")
    self.assertEqual([c.customer_id for c in customers], ["5", "c7"])
    self.assertEqual(customers[1].mobile, "")

  def test_short_customer_query_makes_no_request(self):
    self.assertEqual(self.call("search_customers", " a "), [])
    self.assertEqual(self.call("search_customers", ""), [])
    self.assertEqual(self.requests, [])


if __name__ == "__main__":
  absltest.main()
