"""
Presentation helpers for INR amounts.

Stored totals stay unrounded floats; these functions only shape values for
summaries and printed documents.
"""
from decimal import Decimal, ROUND_HALF_UP

_ONES = [
    "Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
_TENS = [
    "", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety",
]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _round_rupees(amount: float) -> int:
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _group_indian(digits: str) -> str:
    """'10090000' -> '1,00,90,000' (last three digits, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float) -> str:
    """Whole-rupee INR string with Indian digit grouping, e.g. ``₹1,00,900``."""
    rupees = _round_rupees(amount)
    sign = "-" if rupees < 0 else ""
    return f"{sign}₹{_group_indian(str(abs(rupees)))}"


def _below_thousand(num: int) -> str:
    if num == 0:
        return ""
    if num < 10:
        return _ONES[num]
    if num < 20:
        return _TEENS[num - 10]
    if num < 100:
        return _TENS[num // 10] + (f" {_ONES[num % 10]}" if num % 10 else "")
    rest = _below_thousand(num % 100)
    return f"{_ONES[num // 100]} Hundred" + (f" {rest}" if rest else "")


def _words(num: int) -> str:
    parts = []
    if num >= CRORE:
        parts.append(f"{_words(num // CRORE)} Crore")
        num %= CRORE
    if num >= LAKH:
        parts.append(f"{_below_thousand(num // LAKH)} Lakh")
        num %= LAKH
    if num >= THOUSAND:
        parts.append(f"{_below_thousand(num // THOUSAND)} Thousand")
        num %= THOUSAND
    if num > 0:
        parts.append(_below_thousand(num))
    return " ".join(parts)


def amount_in_words(amount: float) -> str:
    """Indian-system words for a rupee amount, e.g. ``One Lakh Nine Hundred Rupees Only``."""
    rupees = _round_rupees(amount)
    if rupees == 0:
        return "Zero Rupees Only"
    if rupees < 0:
        return "Minus " + amount_in_words(-rupees)
    return f"{_words(rupees)} Rupees Only"
