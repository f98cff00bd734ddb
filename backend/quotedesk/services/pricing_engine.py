"""
pricing_engine.py — Pure pricing rules for quotation line items and
installation charges.

Covers:
  - Item-level discount resolution (percentage or fixed amount)
  - Installation charge area/amount from cabinet dimensions (mm → sq.ft)

Both functions are side-effect free. Their results are cached on the records
at write time by QuotationService; nothing recomputes them on read.

Neither function validates its inputs: negative prices or discounts pass
straight through. Range checks belong to the request models at the API edge.
"""

from typing import Optional, Tuple, Union

from quotedesk.config import MM2_PER_SQFT
from quotedesk.models.records import DiscountType


def resolve_discounted_price(
    selling_price: float,
    discount: float,
    discount_type: Union[DiscountType, str] = DiscountType.PERCENTAGE,
) -> float:
    """
    Net unit price after an item-level discount.

    percentage:  selling_price × (1 − discount / 100)
    fixed:       max(0, selling_price − discount)

    A zero discount returns ``selling_price`` unchanged for both kinds.
    """
    if not discount:
        return selling_price

    kind = DiscountType(discount_type)
    if kind is DiscountType.PERCENTAGE:
        return selling_price * (1 - discount / 100)
    return max(0.0, selling_price - discount)


def compute_installation_charge(
    width_mm: Optional[float],
    height_mm: Optional[float],
    price_per_sqft: float,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Return ``(area_sqft, amount)`` for a cabinet face of ``width_mm × height_mm``.

    ``(None, None)`` when either dimension is unset or not positive, so a
    half-filled form never yields a zero or NaN charge.
    """
    if width_mm is None or height_mm is None:
        return None, None
    if width_mm <= 0 or height_mm <= 0:
        return None, None

    area_sqft = (width_mm * height_mm) / MM2_PER_SQFT
    amount = area_sqft * price_per_sqft
    return area_sqft, amount
