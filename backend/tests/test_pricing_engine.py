"""
test_pricing_engine.py — Unit tests for the pure pricing rules.

Tests cover:
  - Percentage and fixed discount resolution
  - Zero-discount identity and the fixed-discount floor at zero
  - Installation area / amount from millimetre dimensions
  - Unset or non-positive dimensions yielding no charge
"""

import pytest

from quotedesk.config import MM2_PER_SQFT
from quotedesk.models.records import DiscountType
from quotedesk.services.pricing_engine import (
    compute_installation_charge,
    resolve_discounted_price,
)

# 1 sq.ft face: 304.8 mm × 304.8 mm
_FOOT_MM = 304.8


# ===========================================================================
# Class 1: Discount resolution
# ===========================================================================

class TestResolveDiscountedPrice:

    def test_percentage_discount(self):
        assert abs(resolve_discounted_price(1000, 10, DiscountType.PERCENTAGE) - 900.0) < 1e-9

    def test_fixed_discount(self):
        assert resolve_discounted_price(1000, 250, DiscountType.FIXED) == 750

    def test_fixed_discount_never_negative(self):
        """A fixed discount larger than the price floors at zero."""
        assert resolve_discounted_price(100, 500, DiscountType.FIXED) == 0.0

    @pytest.mark.parametrize("discount_type", [DiscountType.PERCENTAGE, DiscountType.FIXED])
    def test_zero_discount_returns_selling_price(self, discount_type):
        assert resolve_discounted_price(499.5, 0, discount_type) == 499.5

    def test_string_discount_type_accepted(self):
        assert resolve_discounted_price(200, 50, "fixed") == 150

    def test_default_type_is_percentage(self):
        assert abs(resolve_discounted_price(200, 25) - 150.0) < 1e-9

    def test_hundred_percent_discount_is_free(self):
        assert resolve_discounted_price(750, 100, DiscountType.PERCENTAGE) == 0.0

    def test_unknown_discount_type_rejected(self):
        with pytest.raises(ValueError):
            resolve_discounted_price(100, 10, "bogus")


# ===========================================================================
# Class 2: Installation charge
# ===========================================================================

class TestComputeInstallationCharge:

    def test_one_square_foot(self):
        area, amount = compute_installation_charge(_FOOT_MM, _FOOT_MM, 130)
        assert abs(area - 1.0) < 1e-9
        assert abs(amount - 130.0) < 1e-6

    def test_one_metre_square_at_default_rate(self):
        """1000 × 1000 mm at ₹130/sq.ft → ≈10.7639 sq.ft, ≈₹1399.31."""
        area, amount = compute_installation_charge(1000, 1000, 130)
        assert abs(area - 10.7639) < 1e-4
        assert abs(amount - 1399.31) < 0.01

    def test_typical_cabinet(self):
        """2400 × 600 mm at ₹130/sq.ft."""
        area, amount = compute_installation_charge(2400, 600, 130)
        expected_area = 2400 * 600 / MM2_PER_SQFT
        assert abs(area - expected_area) < 1e-9
        assert abs(amount - expected_area * 130) < 1e-6
        assert abs(area - 15.5) < 0.01

    @pytest.mark.parametrize("width, height", [
        (None, 600),
        (600, None),
        (None, None),
        (0, 600),
        (600, 0),
        (-10, 600),
    ])
    def test_missing_or_non_positive_dimensions(self, width, height):
        assert compute_installation_charge(width, height, 130) == (None, None)

    def test_zero_rate_gives_zero_amount(self):
        area, amount = compute_installation_charge(1000, 1000, 0)
        assert area > 0
        assert amount == 0.0
