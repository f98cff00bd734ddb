"""
conftest.py — Shared pytest fixtures for the Quotedesk backend test suite.

Every stateful fixture is function-scoped: each test gets a fresh in-memory
RecordStore, so ids and totals never leak between tests.

Import-path bootstrapping:
    The ``backend/`` directory is inserted into sys.path so that all
    ``quotedesk.*`` imports resolve correctly regardless of where pytest is invoked.
"""

import sys
import os
import pytest

# ---------------------------------------------------------------------------
# Ensure ``backend/`` is on the import path before any quotedesk imports occur.
# ---------------------------------------------------------------------------
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)


# ---------------------------------------------------------------------------
# Engine fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    from quotedesk.services.record_store import RecordStore
    return RecordStore()


@pytest.fixture
def aggregator(store):
    from quotedesk.services.aggregation_engine import PricingAggregator
    return PricingAggregator(store)


@pytest.fixture
def service(store, aggregator):
    from quotedesk.services.quotation_service import QuotationService
    return QuotationService(store, aggregator)


@pytest.fixture
def sales(service):
    from quotedesk.services.sales_engine import SalesOrderService
    return SalesOrderService(service)


@pytest.fixture
def customers(store):
    from quotedesk.services.customer_service import CustomerService
    return CustomerService(store)


@pytest.fixture
def customer(customers):
    return customers.create_customer("Asha Rao", email="asha@example.com", phone="98450 00000")


@pytest.fixture
def quotation(service, customer):
    """Empty quotation: no global discount, 18% GST, no handling fee."""
    return service.create_quotation(customer_id=customer.id, title="Kitchen remodel", gst_percentage=18)


@pytest.fixture
def room(service, quotation):
    return service.create_room(quotation.id, "Kitchen")


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    """TestClient over a freshly built app (own store, lifespan run)."""
    from fastapi.testclient import TestClient
    from quotedesk.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
