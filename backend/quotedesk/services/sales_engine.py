"""
sales_engine.py — Sales orders derived from quotations, and their payments.

A sales order snapshots the quotation's final price at conversion time.
After every payment create or delete the order's paid / due amounts and
payment status are recomputed from the full payment list.
"""

import logging
import random
import string
import time
from datetime import datetime, timedelta
from typing import List, Optional, Union

from quotedesk import config
from quotedesk.models.records import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    QuotationStatus,
    SalesOrder,
    SalesOrderStatus,
    utcnow,
)
from quotedesk.services.errors import ConflictError, RecordNotFoundError
from quotedesk.services.quotation_service import QuotationService

logger = logging.getLogger("quotedesk-sales")


def _transaction_id() -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"TXN-{int(time.time() * 1000)}-{suffix}"


def payment_status_for(total_amount: float, amount_paid: float) -> PaymentStatus:
    if amount_paid >= total_amount:
        return PaymentStatus.PAID
    if amount_paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.UNPAID


class SalesOrderService:
    def __init__(self, quotations: QuotationService):
        self.quotations = quotations
        self.store = quotations.store

    # ------------------------------------------------------------------
    # Sales orders
    # ------------------------------------------------------------------

    def get_sales_order(self, sales_order_id: int) -> SalesOrder:
        order = self.store.get_sales_order(sales_order_id)
        if order is None:
            raise RecordNotFoundError("Sales order", sales_order_id)
        return order

    def list_sales_orders(self, customer_id: Optional[int] = None) -> List[SalesOrder]:
        orders = sorted(self.store.sales_orders.values(), key=lambda o: o.id)
        if customer_id is not None:
            orders = [o for o in orders if o.customer_id == customer_id]
        return orders

    def create_from_quotation(
        self,
        quotation_id: int,
        expected_delivery_date: Optional[datetime] = None,
        notes: str = "",
    ) -> SalesOrder:
        """Convert a quotation into a sales order and mark the quotation converted."""
        with self.store.locks.hold(quotation_id):
            quotation = self.quotations.get_quotation(quotation_id)
            if self.store.sales_order_for_quotation(quotation_id) is not None:
                raise ConflictError(f"Quotation {quotation_id} already has a sales order")

            now = utcnow()
            order_id = self.store.next_id("sales_order")
            order = SalesOrder(
                id=order_id,
                order_number=f"SO-{now.year}-{order_id:03d}",
                quotation_id=quotation.id,
                customer_id=quotation.customer_id,
                total_amount=quotation.final_price,
                amount_paid=0.0,
                amount_due=quotation.final_price,
                order_date=now,
                expected_delivery_date=(
                    expected_delivery_date
                    or now + timedelta(days=config.SALES_ORDER_DELIVERY_DAYS)
                ),
                notes=notes,
                created_at=now,
                updated_at=now,
            )
            self.store.sales_orders[order_id] = order
            self.quotations.update_quotation_status(quotation_id, QuotationStatus.CONVERTED)

        logger.info(
            "Sales order %s created from %s", order.order_number, quotation.quotation_number,
            extra={"quotation_id": quotation_id},
        )
        return order

    def update_status(
        self, sales_order_id: int, status: Union[SalesOrderStatus, str]
    ) -> SalesOrder:
        order = self.get_sales_order(sales_order_id)
        with self.store.locks.hold(order.quotation_id):
            order.status = SalesOrderStatus(status)
            order.updated_at = utcnow()
        return order

    def cancel(self, sales_order_id: int) -> SalesOrder:
        return self.update_status(sales_order_id, SalesOrderStatus.CANCELLED)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def get_payment(self, payment_id: int) -> Payment:
        payment = self.store.get_payment(payment_id)
        if payment is None:
            raise RecordNotFoundError("Payment", payment_id)
        return payment

    def list_payments(self, sales_order_id: int) -> List[Payment]:
        self.get_sales_order(sales_order_id)
        return self.store.payments_for_sales_order(sales_order_id)

    def record_payment(
        self,
        sales_order_id: int,
        amount: float,
        payment_method: Union[PaymentMethod, str],
        notes: str = "",
        payment_date: Optional[datetime] = None,
    ) -> Payment:
        order = self.get_sales_order(sales_order_id)
        with self.store.locks.hold(order.quotation_id):
            now = utcnow()
            payment_id = self.store.next_id("payment")
            payment = Payment(
                id=payment_id,
                sales_order_id=sales_order_id,
                transaction_id=_transaction_id(),
                receipt_number=f"RCPT-{now.year}-{payment_id:03d}",
                amount=amount,
                payment_method=PaymentMethod(payment_method),
                payment_date=payment_date or now,
                notes=notes,
                created_at=now,
            )
            self.store.payments[payment_id] = payment
            self._rollup(order)

        logger.info(
            "Payment %s recorded against %s", payment.receipt_number, order.order_number,
            extra={"quotation_id": order.quotation_id},
        )
        return payment

    def delete_payment(self, payment_id: int) -> None:
        payment = self.get_payment(payment_id)
        order = self.get_sales_order(payment.sales_order_id)
        with self.store.locks.hold(order.quotation_id):
            del self.store.payments[payment_id]
            self._rollup(order)

    def _rollup(self, order: SalesOrder) -> None:
        amount_paid = sum(p.amount for p in self.store.payments_for_sales_order(order.id))
        order.amount_paid = amount_paid
        order.amount_due = max(0.0, order.total_amount - amount_paid)
        order.payment_status = payment_status_for(order.total_amount, amount_paid)
        order.updated_at = utcnow()
