"""Customer routes, plus the quotations and sales orders filed under each customer."""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotedesk.api.deps import get_customer_service
from quotedesk.services.customer_service import CustomerService

router = APIRouter(prefix="/api/customers", tags=["Customers"])


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    address: str = ""


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


@router.get("")
async def list_customers(service: CustomerService = Depends(get_customer_service)):
    return [asdict(c) for c in service.list_customers()]


@router.post("", status_code=201)
async def create_customer(
    payload: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
):
    return asdict(service.create_customer(**payload.model_dump()))


@router.get("/{customer_id}")
async def get_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    return asdict(service.get_customer(customer_id))


@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    # every customer field is a plain string, so null means "leave as is"
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    return asdict(service.update_customer(customer_id, changes))


@router.delete("/{customer_id}", status_code=204)
async def delete_customer(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    service.delete_customer(customer_id)


@router.get("/{customer_id}/quotations")
async def list_customer_quotations(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    service.get_customer(customer_id)
    return [asdict(q) for q in service.quotations_for(customer_id)]


@router.get("/{customer_id}/sales-orders")
async def list_customer_sales_orders(
    customer_id: int,
    service: CustomerService = Depends(get_customer_service),
):
    service.get_customer(customer_id)
    return [asdict(o) for o in service.sales_orders_for(customer_id)]
