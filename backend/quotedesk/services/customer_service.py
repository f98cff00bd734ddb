"""
customer_service.py — Customer records and the documents filed under them.

Quotations and sales orders reference customers by id. A customer that still
has quotations cannot be deleted; unassign or delete those quotations first.
"""

import logging
import threading
from typing import Any, Dict, List

from quotedesk.models.records import Customer, Quotation, SalesOrder
from quotedesk.services.errors import ConflictError, RecordNotFoundError
from quotedesk.services.record_store import RecordStore

logger = logging.getLogger("quotedesk-customers")

_CUSTOMER_FIELDS = {"name", "email", "phone", "address"}


class CustomerService:
    def __init__(self, store: RecordStore):
        self.store = store
        self._lock = threading.Lock()

    def list_customers(self) -> List[Customer]:
        return self.store.list_customers()

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.store.get_customer(customer_id)
        if customer is None:
            raise RecordNotFoundError("Customer", customer_id)
        return customer

    def create_customer(
        self, name: str, email: str = "", phone: str = "", address: str = ""
    ) -> Customer:
        customer = Customer(
            id=self.store.next_id("customer"),
            name=name,
            email=email,
            phone=phone,
            address=address,
        )
        with self._lock:
            self.store.customers[customer.id] = customer
        logger.info("Customer %s created", customer.id, extra={"customer_id": customer.id})
        return customer

    def update_customer(self, customer_id: int, changes: Dict[str, Any]) -> Customer:
        unknown = set(changes) - _CUSTOMER_FIELDS
        if unknown:
            raise ValueError(f"Unsupported customer field(s): {', '.join(sorted(unknown))}")
        with self._lock:
            customer = self.get_customer(customer_id)
            for name, value in changes.items():
                setattr(customer, name, value)
        return customer

    def delete_customer(self, customer_id: int) -> None:
        with self._lock:
            self.get_customer(customer_id)
            if self.quotations_for(customer_id):
                raise ConflictError(f"Customer {customer_id} still has quotations")
            del self.store.customers[customer_id]
        logger.info("Customer %s deleted", customer_id, extra={"customer_id": customer_id})

    def quotations_for(self, customer_id: int) -> List[Quotation]:
        return [q for q in self.store.list_quotations() if q.customer_id == customer_id]

    def sales_orders_for(self, customer_id: int) -> List[SalesOrder]:
        return sorted(
            (o for o in self.store.sales_orders.values() if o.customer_id == customer_id),
            key=lambda o: o.id,
        )
