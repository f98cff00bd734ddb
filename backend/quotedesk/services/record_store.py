"""
RecordStore — explicit in-memory store for customers, quotations and their children.

The store is plain data plus lookups: it holds no pricing rules and triggers
no recomputation. One instance is built per application (see ``main.create_app``)
or per test, injected into the aggregator and services, and emptied with
``clear()`` on shutdown.
"""
import contextlib
import logging
import threading
from collections import defaultdict
from typing import Dict, Iterator, List, Optional

from quotedesk.models.records import (
    Customer,
    InstallationCharge,
    LineItem,
    LineItemKind,
    Payment,
    Quotation,
    Room,
    SalesOrder,
)

logger = logging.getLogger("quotedesk-store")


class QuotationLocks:
    """
    Registry of re-entrant locks, one per quotation id.

    Every mutation that can move a quotation's totals runs inside
    ``hold(quotation_id)`` so concurrent writers under the same quotation
    cannot interleave their room and quotation recomputes.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.RLock] = defaultdict(threading.RLock)

    def get(self, quotation_id: int) -> threading.RLock:
        with self._guard:
            return self._locks[quotation_id]

    @contextlib.contextmanager
    def hold(self, quotation_id: int) -> Iterator[None]:
        lock = self.get(quotation_id)
        with lock:
            yield

    def discard(self, quotation_id: int) -> None:
        with self._guard:
            self._locks.pop(quotation_id, None)

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


class RecordStore:
    """Process-local record maps with per-kind id counters."""

    def __init__(self):
        self.customers: Dict[int, Customer] = {}
        self.quotations: Dict[int, Quotation] = {}
        self.rooms: Dict[int, Room] = {}
        self.line_items: Dict[int, LineItem] = {}
        self.installation_charges: Dict[int, InstallationCharge] = {}
        self.sales_orders: Dict[int, SalesOrder] = {}
        self.payments: Dict[int, Payment] = {}
        self.locks = QuotationLocks()
        self._id_lock = threading.Lock()
        self._counters: Dict[str, int] = defaultdict(int)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def next_id(self, kind: str) -> int:
        with self._id_lock:
            self._counters[kind] += 1
            return self._counters[kind]

    def clear(self) -> None:
        """Drop every record and reset the id counters."""
        self.customers.clear()
        self.quotations.clear()
        self.rooms.clear()
        self.line_items.clear()
        self.installation_charges.clear()
        self.sales_orders.clear()
        self.payments.clear()
        self.locks.clear()
        with self._id_lock:
            self._counters.clear()
        logger.info("Record store cleared")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self.customers.get(customer_id)

    def get_quotation(self, quotation_id: int) -> Optional[Quotation]:
        return self.quotations.get(quotation_id)

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.rooms.get(room_id)

    def get_line_item(self, item_id: int) -> Optional[LineItem]:
        return self.line_items.get(item_id)

    def get_installation_charge(self, charge_id: int) -> Optional[InstallationCharge]:
        return self.installation_charges.get(charge_id)

    def get_sales_order(self, sales_order_id: int) -> Optional[SalesOrder]:
        return self.sales_orders.get(sales_order_id)

    def get_payment(self, payment_id: int) -> Optional[Payment]:
        return self.payments.get(payment_id)

    def list_customers(self) -> List[Customer]:
        return sorted(self.customers.values(), key=lambda c: c.id)

    def list_quotations(self) -> List[Quotation]:
        return sorted(self.quotations.values(), key=lambda q: q.id)

    def rooms_for_quotation(self, quotation_id: int) -> List[Room]:
        """Rooms of a quotation in display order."""
        rooms = [r for r in self.rooms.values() if r.quotation_id == quotation_id]
        return sorted(rooms, key=lambda r: (r.order, r.id))

    def line_items_for_room(
        self, room_id: int, kind: Optional[LineItemKind] = None
    ) -> List[LineItem]:
        return [
            item for item in self.line_items.values()
            if item.room_id == room_id and (kind is None or item.kind == kind)
        ]

    def charges_for_room(self, room_id: int) -> List[InstallationCharge]:
        return [c for c in self.installation_charges.values() if c.room_id == room_id]

    def charges_for_quotation(self, quotation_id: int) -> List[InstallationCharge]:
        charges: List[InstallationCharge] = []
        for room in self.rooms_for_quotation(quotation_id):
            charges.extend(self.charges_for_room(room.id))
        return charges

    def quotation_id_for_room(self, room_id: int) -> Optional[int]:
        room = self.rooms.get(room_id)
        return room.quotation_id if room else None

    def quotation_id_for_charge(self, charge: InstallationCharge) -> Optional[int]:
        """Non-owning lookup: charge → room → quotation."""
        return self.quotation_id_for_room(charge.room_id)

    def sales_order_for_quotation(self, quotation_id: int) -> Optional[SalesOrder]:
        for order in self.sales_orders.values():
            if order.quotation_id == quotation_id:
                return order
        return None

    def payments_for_sales_order(self, sales_order_id: int) -> List[Payment]:
        return sorted(
            (p for p in self.payments.values() if p.sales_order_id == sales_order_id),
            key=lambda p: p.id,
        )
