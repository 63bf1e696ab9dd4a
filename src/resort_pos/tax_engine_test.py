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

"""Tests for the tax engine."""

from decimal import Decimal

from absl.testing import absltest

from . import tax_engine
from .exceptions import InvalidArgumentError


class ComputeTest(absltest.TestCase):

  def test_standard_rate(self):
    breakdown = tax_engine.compute(200, 18)
    self.assertEqual(breakdown.subtotal, Decimal(200))
    self.assertEqual(breakdown.tax_percent, Decimal(18))
    self.assertEqual(breakdown.tax_amount, Decimal(36))
    self.assertEqual(breakdown.total, Decimal(236))

  def test_zero_percent_keeps_subtotal_exactly(self):
    breakdown = tax_engine.compute(Decimal("149.50"), 0)
    self.assertEqual(breakdown.tax_amount, Decimal(0))
    self.assertEqual(breakdown.total, Decimal("149.50"))

  def test_rounds_half_up_to_whole_unit(self):
    self.assertEqual(tax_engine.compute(250, 5).tax_amount, Decimal(13))
    self.assertEqual(tax_engine.compute(249, 5).tax_amount, Decimal(12))
    self.assertEqual(tax_engine.compute(10, "4.9").tax_amount, Decimal(0))

  def test_total_is_subtotal_plus_tax(self):
    for subtotal, percent in ((0, 18), (1, 100), (999, "12.5"), ("80.25", 5)):
      breakdown = tax_engine.compute(subtotal, percent)
      self.assertEqual(
          breakdown.total, breakdown.subtotal + breakdown.tax_amount
      )

  def test_full_percentage(self):
    breakdown = tax_engine.compute(150, 100)
    self.assertEqual(breakdown.total, Decimal(300))

  def test_float_inputs_use_their_decimal_repr(self):
    breakdown = tax_engine.compute(0.1, 50)
    self.assertEqual(breakdown.subtotal, Decimal("0.1"))

  def test_rejects_invalid_inputs(self):
    for subtotal, percent in (
        (-1, 5),
        (100, -0.5),
        (100, 100.01),
        ("abc", 5),
        (100, "NaN"),
        (float("inf"), 5),
        (True, 5),
        (None, 5),
    ):
      with self.subTest(subtotal=subtotal, percent=percent):
        with self.assertRaises(InvalidArgumentError):
          tax_engine.compute(subtotal, percent)


class ParseTaxPercentTest(absltest.TestCase):

  def test_parses_text(self):
    self.assertEqual(tax_engine.parse_tax_percent(" 18 "), Decimal(18))
    self.assertEqual(tax_engine.parse_tax_percent("2.5"), Decimal("2.5"))

  def test_rejects_blank_and_out_of_range(self):
    for text in ("", "   ", "abc", "-1", "101"):
      with self.subTest(text=text):
        with self.assertRaises(InvalidArgumentError) as cm:
          tax_engine.parse_tax_percent(text)
        self.assertEqual(cm.exception.code, "INVALID_ARGUMENT")


if __name__ == "__main__":
  absltest.main()
