"""FastAPI dependency injection — engine services bound to the running app."""
from fastapi import Request

from quotedesk.services.customer_service import CustomerService
from quotedesk.services.quotation_service import QuotationService
from quotedesk.services.sales_engine import SalesOrderService


def get_customer_service(request: Request) -> CustomerService:
    return request.app.state.customers


def get_quotation_service(request: Request) -> QuotationService:
    return request.app.state.quotations


def get_sales_service(request: Request) -> SalesOrderService:
    return request.app.state.sales
