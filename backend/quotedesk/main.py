"""
Quotedesk API
FastAPI backend for interior quotations: rooms, line items, installation
charges, cascaded price totals, sales orders and payments.
"""
import logging
import time
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# .env must be loaded before quotedesk.config reads the environment
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from quotedesk import config
from quotedesk.api.customer_routes import router as customer_router
from quotedesk.api.installation_routes import router as installation_router
from quotedesk.api.line_item_routes import router as line_item_router
from quotedesk.api.quotation_routes import router as quotation_router
from quotedesk.api.sales_routes import router as sales_router
from quotedesk.services.aggregation_engine import PricingAggregator
from quotedesk.services.customer_service import CustomerService
from quotedesk.services.errors import ConflictError, InvalidReorderError, RecordNotFoundError
from quotedesk.services.logging_config import setup_logging
from quotedesk.services.middleware import RequestTimingMiddleware
from quotedesk.services.quotation_service import QuotationService
from quotedesk.services.record_store import RecordStore
from quotedesk.services.sales_engine import SalesOrderService

setup_logging(level=config.LOG_LEVEL, json_output=config.LOG_FORMAT != "text")
logger = logging.getLogger("quotedesk-api")

_PROCESS_START = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Quotedesk API starting (version %s)", config.API_VERSION)
    yield
    app.state.store.clear()
    logger.info("Quotedesk API stopped")


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    store = RecordStore()
    aggregator = PricingAggregator(store)
    quotations = QuotationService(store, aggregator)

    app = FastAPI(
        title="Quotedesk API",
        version=config.API_VERSION,
        description="Quotation pricing with cascaded room and quotation totals",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.aggregator = aggregator
    app.state.customers = CustomerService(store)
    app.state.quotations = quotations
    app.state.sales = SalesOrderService(quotations)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
    )
    # Request timing + X-Request-ID must be outermost so it wraps all other middleware
    app.add_middleware(RequestTimingMiddleware)

    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return _error(404, exc)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error(409, exc)

    @app.exception_handler(InvalidReorderError)
    async def reorder_handler(request: Request, exc: InvalidReorderError):
        return _error(400, exc)

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        logger.warning("Rejected request: %s", exc)
        return _error(400, exc)

    app.include_router(customer_router)
    app.include_router(quotation_router)
    app.include_router(line_item_router)
    app.include_router(installation_router)
    app.include_router(sales_router)

    @app.get("/health")
    async def health_check():
        return {
            "status": "active",
            "version": config.API_VERSION,
            "quotations": len(store.quotations),
        }

    @app.get("/metrics")
    async def metrics():
        """Recompute counters and timings from the in-process RecalcTracker."""
        snapshot = aggregator.tracker.get_metrics()
        return {
            "uptime_seconds": round(time.monotonic() - _PROCESS_START, 1),
            **snapshot,
        }

    return app


app = create_app()
