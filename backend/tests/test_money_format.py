"""
test_money_format.py — INR display helpers.
"""

import pytest

from quotedesk.services.money_format import amount_in_words, format_currency


class TestFormatCurrency:

    @pytest.mark.parametrize("amount, expected", [
        (0, "₹0"),
        (999, "₹999"),
        (1000, "₹1,000"),
        (100900, "₹1,00,900"),
        (1234567.5, "₹12,34,568"),
        (10090000, "₹1,00,90,000"),
        (1008.9, "₹1,009"),
        (-2500, "-₹2,500"),
    ])
    def test_indian_grouping(self, amount, expected):
        assert format_currency(amount) == expected


class TestAmountInWords:

    @pytest.mark.parametrize("amount, expected", [
        (0, "Zero Rupees Only"),
        (7, "Seven Rupees Only"),
        (15, "Fifteen Rupees Only"),
        (40, "Forty Rupees Only"),
        (1008.9, "One Thousand Nine Rupees Only"),
        (12345, "Twelve Thousand Three Hundred Forty Five Rupees Only"),
        (100900, "One Lakh Nine Hundred Rupees Only"),
        (100000000, "Ten Crore Rupees Only"),
        (-250, "Minus Two Hundred Fifty Rupees Only"),
    ])
    def test_words(self, amount, expected):
        assert amount_in_words(amount) == expected
