"""
test_sales_engine.py — Sales order conversion and payment rollup.
"""

import pytest

from quotedesk.models.records import (
    LineItemKind,
    PaymentMethod,
    PaymentStatus,
    QuotationStatus,
    SalesOrderStatus,
)
from quotedesk.services.errors import ConflictError, RecordNotFoundError
from quotedesk.services.sales_engine import payment_status_for


@pytest.fixture
def priced_quotation(service, quotation, room):
    """1000 product, 18% GST → final 1180."""
    service.create_line_item(room.id, LineItemKind.PRODUCT, "Carcass", selling_price=1000)
    return service.get_quotation(quotation.id)


class TestPaymentStatus:

    @pytest.mark.parametrize("total, paid, expected", [
        (1000, 0, PaymentStatus.UNPAID),
        (1000, 1, PaymentStatus.PARTIALLY_PAID),
        (1000, 1000, PaymentStatus.PAID),
        (1000, 1500, PaymentStatus.PAID),
        (0, 0, PaymentStatus.PAID),
    ])
    def test_status(self, total, paid, expected):
        assert payment_status_for(total, paid) == expected


class TestConversion:

    def test_snapshot_of_final_price(self, sales, service, priced_quotation):
        order = sales.create_from_quotation(priced_quotation.id, notes="Deliver after 5pm")
        assert order.order_number.startswith("SO-")
        assert abs(order.total_amount - 1180.0) < 1e-6
        assert abs(order.amount_due - 1180.0) < 1e-6
        assert order.customer_id == priced_quotation.customer_id
        assert order.status == SalesOrderStatus.PENDING
        assert order.expected_delivery_date is not None
        assert service.get_quotation(priced_quotation.id).status == QuotationStatus.CONVERTED

    def test_second_conversion_conflicts(self, sales, priced_quotation):
        sales.create_from_quotation(priced_quotation.id)
        with pytest.raises(ConflictError):
            sales.create_from_quotation(priced_quotation.id)

    def test_unknown_quotation(self, sales):
        with pytest.raises(RecordNotFoundError):
            sales.create_from_quotation(404)

    def test_cancel(self, sales, priced_quotation):
        order = sales.create_from_quotation(priced_quotation.id)
        assert sales.cancel(order.id).status == SalesOrderStatus.CANCELLED

    def test_list_filters_by_customer(self, sales, service, customers, priced_quotation):
        other_customer = customers.create_customer("Vikram Shah")
        other = service.create_quotation(customer_id=other_customer.id)
        sales.create_from_quotation(priced_quotation.id)
        sales.create_from_quotation(other.id)
        assert len(sales.list_sales_orders()) == 2
        assert [o.customer_id for o in sales.list_sales_orders(customer_id=other_customer.id)] == [other_customer.id]


class TestPayments:

    def test_partial_then_full(self, sales, priced_quotation):
        order = sales.create_from_quotation(priced_quotation.id)

        first = sales.record_payment(order.id, 500, PaymentMethod.UPI)
        assert first.receipt_number.startswith("RCPT-")
        assert first.transaction_id.startswith("TXN-")
        assert order.payment_status == PaymentStatus.PARTIALLY_PAID
        assert abs(order.amount_due - 680.0) < 1e-6

        sales.record_payment(order.id, 680, "bank_transfer")
        assert order.payment_status == PaymentStatus.PAID
        assert order.amount_due == 0.0

    def test_overpayment_clamps_due(self, sales, priced_quotation):
        order = sales.create_from_quotation(priced_quotation.id)
        sales.record_payment(order.id, 2000, PaymentMethod.CASH)
        assert order.amount_due == 0.0
        assert order.amount_paid == 2000

    def test_delete_payment_rolls_back(self, sales, priced_quotation):
        order = sales.create_from_quotation(priced_quotation.id)
        payment = sales.record_payment(order.id, 500, PaymentMethod.CARD)
        sales.delete_payment(payment.id)
        assert order.amount_paid == 0
        assert order.payment_status == PaymentStatus.UNPAID
        assert sales.list_payments(order.id) == []

    def test_unknown_sales_order(self, sales):
        with pytest.raises(RecordNotFoundError):
            sales.record_payment(404, 100, PaymentMethod.CASH)
