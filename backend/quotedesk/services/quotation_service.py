"""
QuotationService — create / update / delete entry points for quotations,
rooms, line items and installation charges.

Every mutating call runs under the owning quotation's lock and finishes the
full recompute cascade before it returns:

    line item / installation charge  →  recalc_room  →  recalc_quotation
    room create / delete / reorder    →  recalc_quotation
    policy update                     →  recalc_quotation

Readers only ever see cached totals; nothing here recomputes on read.
"""

import contextlib
import logging
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Union

from quotedesk import config
from quotedesk.models.records import (
    DiscountType,
    InstallationCharge,
    LineItem,
    LineItemKind,
    Quotation,
    QuotationStatus,
    Room,
    utcnow,
)
from quotedesk.services.aggregation_engine import PricingAggregator
from quotedesk.services.errors import ConflictError, InvalidReorderError, RecordNotFoundError
from quotedesk.services.perf_monitor import timed
from quotedesk.services.pricing_engine import (
    compute_installation_charge,
    resolve_discounted_price,
)
from quotedesk.services.record_store import RecordStore

logger = logging.getLogger("quotedesk-quotations")

_QUOTATION_DETAIL_FIELDS = {"title", "description", "customer_id", "valid_until", "terms"}
_LINE_ITEM_FIELDS = {
    "name", "description", "category", "selling_price", "quantity", "discount", "discount_type",
}
_PRICE_INPUT_FIELDS = {"selling_price", "discount", "discount_type"}
_CHARGE_FIELDS = {"cabinet_type", "width_mm", "height_mm", "price_per_sqft"}
_CHARGE_INPUT_FIELDS = {"width_mm", "height_mm", "price_per_sqft"}


def _reject_unknown(changes: Dict[str, Any], allowed: set, kind: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"Unsupported {kind} field(s): {', '.join(sorted(unknown))}")


class QuotationService:
    """Mutation hooks and read model over a RecordStore."""

    def __init__(self, store: RecordStore, aggregator: Optional[PricingAggregator] = None):
        self.store = store
        self.aggregator = aggregator or PricingAggregator(store)

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def check_customer(self, customer_id: Optional[int]) -> None:
        """Quotations may be unassigned; an assigned customer must exist."""
        if customer_id is not None and self.store.get_customer(customer_id) is None:
            raise RecordNotFoundError("Customer", customer_id)

    def get_quotation(self, quotation_id: int) -> Quotation:
        quotation = self.store.get_quotation(quotation_id)
        if quotation is None:
            raise RecordNotFoundError("Quotation", quotation_id)
        return quotation

    def get_room(self, room_id: int) -> Room:
        room = self.store.get_room(room_id)
        if room is None:
            raise RecordNotFoundError("Room", room_id)
        return room

    def get_line_item(self, item_id: int, kind: Optional[LineItemKind] = None) -> LineItem:
        item = self.store.get_line_item(item_id)
        if item is None or (kind is not None and item.kind != LineItemKind(kind)):
            label = LineItemKind(kind).value.capitalize() if kind else "Line item"
            raise RecordNotFoundError(label, item_id)
        return item

    def get_installation_charge(self, charge_id: int) -> InstallationCharge:
        charge = self.store.get_installation_charge(charge_id)
        if charge is None:
            raise RecordNotFoundError("Installation charge", charge_id)
        return charge

    @contextlib.contextmanager
    def _room_scope(self, room_id: int) -> Iterator[Room]:
        """Hold the owning quotation's lock and yield the (re-checked) room."""
        quotation_id = self.get_room(room_id).quotation_id
        with self.store.locks.hold(quotation_id):
            yield self.get_room(room_id)

    # ------------------------------------------------------------------
    # Quotations
    # ------------------------------------------------------------------

    def list_quotations(self, customer_id: Optional[int] = None) -> List[Quotation]:
        quotations = self.store.list_quotations()
        if customer_id is not None:
            quotations = [q for q in quotations if q.customer_id == customer_id]
        return quotations

    def create_quotation(
        self,
        customer_id: Optional[int] = None,
        title: str = "",
        description: Optional[str] = None,
        global_discount: float = 0.0,
        gst_percentage: Optional[float] = None,
        installation_handling: float = 0.0,
        valid_until: Optional[datetime] = None,
        terms: Optional[str] = None,
        quotation_number: Optional[str] = None,
    ) -> Quotation:
        now = utcnow()
        self.check_customer(customer_id)
        quotation_id = self.store.next_id("quotation")
        quotation = Quotation(
            id=quotation_id,
            quotation_number=quotation_number or f"Q-{now.year}-{quotation_id:03d}",
            customer_id=customer_id,
            title=title,
            description=description,
            global_discount=global_discount,
            gst_percentage=(
                config.DEFAULT_GST_PERCENTAGE if gst_percentage is None else gst_percentage
            ),
            installation_handling=installation_handling,
            valid_until=valid_until or now + timedelta(days=config.QUOTATION_VALIDITY_DAYS),
            terms=terms if terms is not None else config.DEFAULT_TERMS,
            created_at=now,
            updated_at=now,
        )
        with self.store.locks.hold(quotation_id):
            self.store.quotations[quotation_id] = quotation
            self.aggregator.recalc_quotation(quotation_id)

        logger.info(
            "Quotation %s created", quotation.quotation_number,
            extra={"quotation_id": quotation_id},
        )
        return quotation

    def update_quotation_policy(
        self,
        quotation_id: int,
        global_discount: Optional[float] = None,
        gst_percentage: Optional[float] = None,
        installation_handling: Optional[float] = None,
    ) -> Quotation:
        """Change any of the three pricing policy inputs and recompute the quotation."""
        with self.store.locks.hold(quotation_id):
            quotation = self.get_quotation(quotation_id)
            if global_discount is not None:
                quotation.global_discount = global_discount
            if gst_percentage is not None:
                quotation.gst_percentage = gst_percentage
            if installation_handling is not None:
                quotation.installation_handling = installation_handling
            self.aggregator.recalc_quotation(quotation_id)

        logger.info("Quotation policy updated", extra={"quotation_id": quotation_id})
        return quotation

    def update_quotation_details(self, quotation_id: int, changes: Dict[str, Any]) -> Quotation:
        """Update non-pricing metadata (title, description, customer, validity, terms)."""
        _reject_unknown(changes, _QUOTATION_DETAIL_FIELDS, "quotation")
        if "customer_id" in changes:
            self.check_customer(changes["customer_id"])
        with self.store.locks.hold(quotation_id):
            quotation = self.get_quotation(quotation_id)
            for name, value in changes.items():
                setattr(quotation, name, value)
            quotation.updated_at = utcnow()
        return quotation

    def update_quotation_status(
        self, quotation_id: int, status: Union[QuotationStatus, str]
    ) -> Quotation:
        with self.store.locks.hold(quotation_id):
            quotation = self.get_quotation(quotation_id)
            quotation.status = QuotationStatus(status)
            quotation.updated_at = utcnow()

        logger.info(
            "Quotation status -> %s", quotation.status.value,
            extra={"quotation_id": quotation_id},
        )
        return quotation

    def delete_quotation(self, quotation_id: int) -> None:
        """Delete a quotation and its rooms. Converted quotations are kept with their sales order."""
        with self.store.locks.hold(quotation_id):
            self.get_quotation(quotation_id)
            if self.store.sales_order_for_quotation(quotation_id) is not None:
                raise ConflictError(
                    f"Quotation {quotation_id} has a sales order and cannot be deleted"
                )
            for room in self.store.rooms_for_quotation(quotation_id):
                self._drop_room_children(room.id)
                del self.store.rooms[room.id]
            del self.store.quotations[quotation_id]
        self.store.locks.discard(quotation_id)
        logger.info("Quotation deleted", extra={"quotation_id": quotation_id})

    @timed
    def duplicate_quotation(
        self, quotation_id: int, new_customer_id: Optional[int] = None
    ) -> Quotation:
        """
        Copy a quotation with all rooms, line items and installation charges.

        Item discounted prices and charge amounts are recomputed through the
        normal create paths rather than copied, so the copy is consistent even
        if the source carried stale cached values.
        """
        with self.store.locks.hold(quotation_id):
            source = self.get_quotation(quotation_id)
            copy = self.create_quotation(
                customer_id=new_customer_id if new_customer_id is not None else source.customer_id,
                title=f"{source.title} (Copy)",
                description=source.description,
                global_discount=source.global_discount,
                gst_percentage=source.gst_percentage,
                installation_handling=source.installation_handling,
                valid_until=source.valid_until,
                terms=source.terms,
            )
            for room in self.store.rooms_for_quotation(quotation_id):
                new_room = self.create_room(copy.id, room.name, room.description)
                for item in sorted(self.store.line_items_for_room(room.id), key=lambda i: i.id):
                    self.create_line_item(
                        new_room.id,
                        kind=item.kind,
                        name=item.name,
                        selling_price=item.selling_price,
                        quantity=item.quantity or 1,
                        discount=item.discount or 0.0,
                        discount_type=item.discount_type,
                        description=item.description,
                        category=item.category,
                    )
                for charge in sorted(self.store.charges_for_room(room.id), key=lambda c: c.id):
                    self.create_installation_charge(
                        new_room.id,
                        cabinet_type=charge.cabinet_type,
                        width_mm=charge.width_mm,
                        height_mm=charge.height_mm,
                        price_per_sqft=charge.price_per_sqft,
                    )

        logger.info(
            "Quotation %s duplicated as %s", source.quotation_number, copy.quotation_number,
            extra={"quotation_id": copy.id},
        )
        return copy

    def get_quotation_details(self, quotation_id: int) -> Dict[str, Any]:
        """Quotation with its ordered rooms, their items and installation charges."""
        quotation = self.get_quotation(quotation_id)
        rooms = []
        for room in self.store.rooms_for_quotation(quotation_id):
            rooms.append(self.room_details(room))
        details = asdict(quotation)
        details["rooms"] = rooms
        return details

    def room_details(self, room: Room) -> Dict[str, Any]:
        data = asdict(room)
        items = sorted(self.store.line_items_for_room(room.id), key=lambda i: i.id)
        data["products"] = [asdict(i) for i in items if i.kind == LineItemKind.PRODUCT]
        data["accessories"] = [asdict(i) for i in items if i.kind == LineItemKind.ACCESSORY]
        data["installation_charges"] = [
            self.charge_to_dict(c)
            for c in sorted(self.store.charges_for_room(room.id), key=lambda c: c.id)
        ]
        return data

    def charge_to_dict(self, charge: InstallationCharge) -> Dict[str, Any]:
        data = asdict(charge)
        data["quotation_id"] = self.store.quotation_id_for_charge(charge)
        return data

    # ------------------------------------------------------------------
    # Rooms
    # ------------------------------------------------------------------

    def list_rooms(self, quotation_id: int) -> List[Room]:
        self.get_quotation(quotation_id)
        return self.store.rooms_for_quotation(quotation_id)

    def create_room(
        self,
        quotation_id: int,
        name: str,
        description: Optional[str] = None,
        position: Optional[int] = None,
    ) -> Room:
        """
        Append a room, or insert it at ``position`` (clamped to the valid range).
        Room orders stay dense and zero-based either way.
        """
        with self.store.locks.hold(quotation_id):
            self.get_quotation(quotation_id)
            siblings = self.store.rooms_for_quotation(quotation_id)
            room = Room(
                id=self.store.next_id("room"),
                quotation_id=quotation_id,
                name=name,
                description=description,
            )
            if position is None or position >= len(siblings):
                siblings.append(room)
            else:
                siblings.insert(max(0, position), room)
            self.store.rooms[room.id] = room
            self._renumber(siblings)
            self.aggregator.recalc_quotation(quotation_id)

        logger.info(
            "Room %s created", room.id,
            extra={"quotation_id": quotation_id, "room_id": room.id},
        )
        return room

    def update_room(self, room_id: int, changes: Dict[str, Any]) -> Room:
        """Rename or re-describe a room; its totals are never caller-writable."""
        _reject_unknown(changes, {"name", "description"}, "room")
        with self._room_scope(room_id) as room:
            for name, value in changes.items():
                setattr(room, name, value)
        return room

    def delete_room(self, room_id: int) -> None:
        with self._room_scope(room_id) as room:
            quotation_id = room.quotation_id
            self._drop_room_children(room_id)
            del self.store.rooms[room_id]
            self._renumber(self.store.rooms_for_quotation(quotation_id))
            self.aggregator.recalc_quotation(quotation_id)

        logger.info(
            "Room %s deleted", room_id,
            extra={"quotation_id": quotation_id, "room_id": room_id},
        )

    def reorder_rooms(self, quotation_id: int, room_ids: List[int]) -> List[Room]:
        """Assign order 0..n-1 following ``room_ids``, which must list every room exactly once."""
        with self.store.locks.hold(quotation_id):
            self.get_quotation(quotation_id)
            current = {r.id for r in self.store.rooms_for_quotation(quotation_id)}
            if len(room_ids) != len(set(room_ids)) or set(room_ids) != current:
                raise InvalidReorderError(
                    f"Room ids {room_ids} are not a permutation of quotation "
                    f"{quotation_id} rooms {sorted(current)}"
                )
            rooms = [self.store.rooms[rid] for rid in room_ids]
            self._renumber(rooms)
            self.aggregator.recalc_quotation(quotation_id)
        return rooms

    def _drop_room_children(self, room_id: int) -> None:
        for item in self.store.line_items_for_room(room_id):
            del self.store.line_items[item.id]
        for charge in self.store.charges_for_room(room_id):
            del self.store.installation_charges[charge.id]

    @staticmethod
    def _renumber(rooms: List[Room]) -> None:
        for index, room in enumerate(rooms):
            room.order = index

    # ------------------------------------------------------------------
    # Line items (products and accessories)
    # ------------------------------------------------------------------

    def list_line_items(self, room_id: int, kind: Optional[LineItemKind] = None) -> List[LineItem]:
        self.get_room(room_id)
        kind = LineItemKind(kind) if kind is not None else None
        return sorted(self.store.line_items_for_room(room_id, kind), key=lambda i: i.id)

    def create_line_item(
        self,
        room_id: int,
        kind: Union[LineItemKind, str],
        name: str,
        selling_price: float,
        quantity: int = 1,
        discount: float = 0.0,
        discount_type: Union[DiscountType, str] = DiscountType.PERCENTAGE,
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> LineItem:
        discount_type = DiscountType(discount_type)
        with self._room_scope(room_id):
            item = LineItem(
                id=self.store.next_id("line_item"),
                room_id=room_id,
                kind=LineItemKind(kind),
                name=name,
                description=description,
                category=category,
                selling_price=selling_price,
                quantity=quantity,
                discount=discount,
                discount_type=discount_type,
                discounted_price=resolve_discounted_price(selling_price, discount, discount_type),
            )
            self.store.line_items[item.id] = item
            self.aggregator.recalc_room(room_id)

        logger.info(
            "%s %s created", item.kind.value.capitalize(), item.id,
            extra={"room_id": room_id},
        )
        return item

    def update_line_item(
        self,
        item_id: int,
        changes: Dict[str, Any],
        kind: Optional[LineItemKind] = None,
    ) -> LineItem:
        _reject_unknown(changes, _LINE_ITEM_FIELDS, "line item")
        # Coerce everything before the first write so a bad value leaves the item untouched
        if "discount_type" in changes:
            changes = {**changes, "discount_type": DiscountType(changes["discount_type"])}
        room_id = self.get_line_item(item_id, kind).room_id
        with self._room_scope(room_id):
            item = self.get_line_item(item_id, kind)
            for name, value in changes.items():
                setattr(item, name, value)
            if _PRICE_INPUT_FIELDS & set(changes):
                item.discounted_price = resolve_discounted_price(
                    item.selling_price, item.discount or 0.0, item.discount_type
                )
            self.aggregator.recalc_room(item.room_id)
        return item

    def delete_line_item(self, item_id: int, kind: Optional[LineItemKind] = None) -> None:
        room_id = self.get_line_item(item_id, kind).room_id
        with self._room_scope(room_id):
            item = self.get_line_item(item_id, kind)
            del self.store.line_items[item_id]
            self.aggregator.recalc_room(item.room_id)

        logger.info("Line item %s deleted", item_id, extra={"room_id": room_id})

    # ------------------------------------------------------------------
    # Installation charges
    # ------------------------------------------------------------------

    def list_installation_charges(self, room_id: int) -> List[InstallationCharge]:
        self.get_room(room_id)
        return sorted(self.store.charges_for_room(room_id), key=lambda c: c.id)

    def list_quotation_installation_charges(self, quotation_id: int) -> List[InstallationCharge]:
        self.get_quotation(quotation_id)
        return self.store.charges_for_quotation(quotation_id)

    def create_installation_charge(
        self,
        room_id: int,
        cabinet_type: str,
        width_mm: Optional[float],
        height_mm: Optional[float],
        price_per_sqft: Optional[float] = None,
    ) -> InstallationCharge:
        if price_per_sqft is None:
            price_per_sqft = config.DEFAULT_PRICE_PER_SQFT
        with self._room_scope(room_id):
            area_sqft, amount = compute_installation_charge(width_mm, height_mm, price_per_sqft)
            charge = InstallationCharge(
                id=self.store.next_id("installation_charge"),
                room_id=room_id,
                cabinet_type=cabinet_type,
                width_mm=width_mm,
                height_mm=height_mm,
                price_per_sqft=price_per_sqft,
                area_sqft=area_sqft,
                amount=amount,
            )
            self.store.installation_charges[charge.id] = charge
            self.aggregator.recalc_room(room_id)

        logger.info("Installation charge %s created", charge.id, extra={"room_id": room_id})
        return charge

    def update_installation_charge(
        self, charge_id: int, changes: Dict[str, Any]
    ) -> InstallationCharge:
        _reject_unknown(changes, _CHARGE_FIELDS, "installation charge")
        if "price_per_sqft" in changes and changes["price_per_sqft"] is None:
            changes = {**changes, "price_per_sqft": config.DEFAULT_PRICE_PER_SQFT}
        room_id = self.get_installation_charge(charge_id).room_id
        with self._room_scope(room_id):
            charge = self.get_installation_charge(charge_id)
            for name, value in changes.items():
                setattr(charge, name, value)
            if _CHARGE_INPUT_FIELDS & set(changes):
                charge.area_sqft, charge.amount = compute_installation_charge(
                    charge.width_mm, charge.height_mm, charge.price_per_sqft
                )
            charge.updated_at = utcnow()
            self.aggregator.recalc_room(charge.room_id)
        return charge

    def delete_installation_charge(self, charge_id: int) -> None:
        room_id = self.get_installation_charge(charge_id).room_id
        with self._room_scope(room_id):
            charge = self.get_installation_charge(charge_id)
            del self.store.installation_charges[charge_id]
            self.aggregator.recalc_room(charge.room_id)

        logger.info("Installation charge %s deleted", charge_id, extra={"room_id": room_id})
