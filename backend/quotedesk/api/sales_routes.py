"""Sales order and payment routes."""
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotedesk.api.deps import get_sales_service
from quotedesk.models.records import PaymentMethod, SalesOrderStatus
from quotedesk.services.sales_engine import SalesOrderService

router = APIRouter(prefix="/api", tags=["Sales Orders"])


class SalesOrderCreate(BaseModel):
    expected_delivery_date: Optional[datetime] = None
    notes: str = ""


class SalesOrderStatusUpdate(BaseModel):
    status: SalesOrderStatus


class PaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    notes: str = ""
    payment_date: Optional[datetime] = None


@router.post("/quotations/{quotation_id}/sales-order", status_code=201)
async def convert_quotation(
    quotation_id: int,
    payload: Optional[SalesOrderCreate] = None,
    service: SalesOrderService = Depends(get_sales_service),
):
    """Convert a quotation into a sales order at its current final price."""
    payload = payload or SalesOrderCreate()
    order = service.create_from_quotation(
        quotation_id,
        expected_delivery_date=payload.expected_delivery_date,
        notes=payload.notes,
    )
    return asdict(order)


@router.get("/sales-orders")
async def list_sales_orders(
    customer_id: Optional[int] = None,
    service: SalesOrderService = Depends(get_sales_service),
):
    return [asdict(o) for o in service.list_sales_orders(customer_id)]


@router.get("/sales-orders/{sales_order_id}")
async def get_sales_order(
    sales_order_id: int,
    service: SalesOrderService = Depends(get_sales_service),
):
    order = service.get_sales_order(sales_order_id)
    data = asdict(order)
    data["payments"] = [asdict(p) for p in service.list_payments(sales_order_id)]
    return data


@router.put("/sales-orders/{sales_order_id}/status")
async def update_sales_order_status(
    sales_order_id: int,
    payload: SalesOrderStatusUpdate,
    service: SalesOrderService = Depends(get_sales_service),
):
    return asdict(service.update_status(sales_order_id, payload.status))


@router.get("/sales-orders/{sales_order_id}/payments")
async def list_payments(
    sales_order_id: int,
    service: SalesOrderService = Depends(get_sales_service),
):
    return [asdict(p) for p in service.list_payments(sales_order_id)]


@router.post("/sales-orders/{sales_order_id}/payments", status_code=201)
async def record_payment(
    sales_order_id: int,
    payload: PaymentCreate,
    service: SalesOrderService = Depends(get_sales_service),
):
    payment = service.record_payment(sales_order_id, **payload.model_dump())
    return asdict(payment)


@router.get("/payments/{payment_id}")
async def get_payment(
    payment_id: int,
    service: SalesOrderService = Depends(get_sales_service),
):
    return asdict(service.get_payment(payment_id))


@router.delete("/payments/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: int,
    service: SalesOrderService = Depends(get_sales_service),
):
    service.delete_payment(payment_id)
