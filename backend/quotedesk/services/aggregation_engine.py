"""
aggregation_engine.py — Room and quotation total recomputation.

Hierarchy:
    line item (product / accessory)  →  room  →  quotation

recalc_room sums the cached unit prices of a room's line items (× quantity)
and always cascades into recalc_quotation for the owning quotation. The
quotation rollup runs in a fixed order:

    1. Σ room selling / discounted totals
    2. Σ installation charge amounts across all rooms
    3. global discount on the DISCOUNTED total (stacks on item discounts)
    4. subtotal = after global discount + installation + handling
    5. GST on that subtotal
    6. final = subtotal + GST

Derived values are stored unrounded; rounding is a presentation concern.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from quotedesk.models.records import Quotation, Room, utcnow
from quotedesk.services.perf_monitor import RecalcTracker
from quotedesk.services.record_store import RecordStore

logger = logging.getLogger("quotedesk-aggregation")


@dataclass(frozen=True)
class QuotationTotals:
    """Breakdown of one quotation rollup. Only the persisted fields land on the record."""
    total_selling_price: float
    total_discounted_price: float
    total_installation_charges: float
    after_global_discount: float
    subtotal: float
    gst_amount: float
    final_price: float


def compute_quotation_totals(
    total_selling_price: float,
    total_discounted_price: float,
    total_installation_charges: float,
    global_discount: float,
    installation_handling: float,
    gst_percentage: float,
) -> QuotationTotals:
    """Apply the quotation-level policy to already-summed room and charge totals."""
    if global_discount > 0:
        after_global_discount = total_discounted_price * (1 - global_discount / 100)
    else:
        after_global_discount = total_discounted_price

    subtotal = after_global_discount + total_installation_charges + installation_handling
    gst_amount = subtotal * (gst_percentage / 100)
    final_price = subtotal + gst_amount

    return QuotationTotals(
        total_selling_price=total_selling_price,
        total_discounted_price=total_discounted_price,
        total_installation_charges=total_installation_charges,
        after_global_discount=after_global_discount,
        subtotal=subtotal,
        gst_amount=gst_amount,
        final_price=final_price,
    )


class PricingAggregator:
    """
    Writes the derived totals of rooms and quotations held in a RecordStore.

    A missing room or quotation makes the call a logged no-op returning None;
    entry points in QuotationService check existence before mutating, so this
    only happens when a parent vanished mid-cascade.
    """

    def __init__(self, store: RecordStore, tracker: Optional[RecalcTracker] = None):
        self.store = store
        self.tracker = tracker or RecalcTracker()

    # ------------------------------------------------------------------
    # Room
    # ------------------------------------------------------------------

    def recalc_room(self, room_id: int) -> Optional[Room]:
        room = self.store.get_room(room_id)
        if room is None:
            logger.warning("recalc_room skipped: room %s not found", room_id, extra={"room_id": room_id})
            self.tracker.record_skipped("room")
            return None

        start = time.perf_counter()
        selling_price = 0.0
        discounted_price = 0.0
        for item in self.store.line_items_for_room(room_id):
            selling_price += item.selling_price * item.quantity
            discounted_price += item.discounted_price * item.quantity

        room.selling_price = selling_price
        room.discounted_price = discounted_price
        self.tracker.record_recalc("room", (time.perf_counter() - start) * 1000)

        logger.debug(
            "room totals recomputed",
            extra={
                "room_id": room_id,
                "quotation_id": room.quotation_id,
                "selling_price": selling_price,
                "discounted_price": discounted_price,
            },
        )

        self.recalc_quotation(room.quotation_id)
        return room

    # ------------------------------------------------------------------
    # Quotation
    # ------------------------------------------------------------------

    def recalc_quotation(self, quotation_id: int) -> Optional[QuotationTotals]:
        quotation = self.store.get_quotation(quotation_id)
        if quotation is None:
            logger.warning(
                "recalc_quotation skipped: quotation %s not found",
                quotation_id,
                extra={"quotation_id": quotation_id},
            )
            self.tracker.record_skipped("quotation")
            return None

        start = time.perf_counter()
        total_selling_price = 0.0
        total_discounted_price = 0.0
        total_installation_charges = 0.0
        for room in self.store.rooms_for_quotation(quotation_id):
            total_selling_price += room.selling_price
            total_discounted_price += room.discounted_price
            for charge in self.store.charges_for_room(room.id):
                if charge.amount is not None:
                    total_installation_charges += charge.amount

        totals = compute_quotation_totals(
            total_selling_price=total_selling_price,
            total_discounted_price=total_discounted_price,
            total_installation_charges=total_installation_charges,
            global_discount=quotation.global_discount,
            installation_handling=quotation.installation_handling,
            gst_percentage=quotation.gst_percentage,
        )
        self._persist(quotation, totals)
        self.tracker.record_recalc("quotation", (time.perf_counter() - start) * 1000)

        logger.debug(
            "quotation totals recomputed",
            extra={"quotation_id": quotation_id, "final_price": totals.final_price},
        )
        return totals

    @staticmethod
    def _persist(quotation: Quotation, totals: QuotationTotals) -> None:
        quotation.total_selling_price = totals.total_selling_price
        quotation.total_discounted_price = totals.total_discounted_price
        quotation.total_installation_charges = totals.total_installation_charges
        quotation.gst_amount = totals.gst_amount
        quotation.final_price = totals.final_price
        quotation.updated_at = utcnow()
