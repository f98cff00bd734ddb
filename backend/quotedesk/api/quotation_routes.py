"""Quotation and room routes — thin handlers over QuotationService."""
from dataclasses import asdict
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotedesk import config
from quotedesk.api.deps import get_quotation_service
from quotedesk.models.records import QuotationStatus
from quotedesk.services.money_format import amount_in_words, format_currency
from quotedesk.services.quotation_service import QuotationService
from quotedesk.services.validation_engine import validate_quotation

router = APIRouter(prefix="/api", tags=["Quotations"])


# ─── Pydantic schemas ────────────────────────────────────────────────────────

class QuotationCreate(BaseModel):
    customer_id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    global_discount: float = Field(0.0, ge=0, le=100)
    gst_percentage: Optional[float] = Field(None, ge=0)
    installation_handling: float = Field(0.0, ge=0)
    valid_until: Optional[datetime] = None
    terms: Optional[str] = None


class QuotationUpdate(BaseModel):
    customer_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    valid_until: Optional[datetime] = None
    terms: Optional[str] = None


class PolicyUpdate(BaseModel):
    global_discount: Optional[float] = Field(None, ge=0, le=100)
    gst_percentage: Optional[float] = Field(None, ge=0)
    installation_handling: Optional[float] = Field(None, ge=0)


class StatusUpdate(BaseModel):
    status: QuotationStatus


class DuplicateRequest(BaseModel):
    customer_id: Optional[int] = None


class RoomCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class RoomReorder(BaseModel):
    room_ids: List[int]


# Fields whose records hold a plain value; a null in a PUT body leaves them unchanged.
_NON_NULLABLE = {"title", "terms", "name"}


def _changes(payload: BaseModel) -> dict:
    return {
        name: value
        for name, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or name not in _NON_NULLABLE
    }


# ─── Quotations ─────────────────────────────────────────────────────────────

@router.get("/quotations")
async def list_quotations(
    customer_id: Optional[int] = None,
    service: QuotationService = Depends(get_quotation_service),
):
    return [asdict(q) for q in service.list_quotations(customer_id)]


@router.post("/quotations", status_code=201)
async def create_quotation(
    payload: QuotationCreate,
    service: QuotationService = Depends(get_quotation_service),
):
    quotation = service.create_quotation(**payload.model_dump())
    return asdict(quotation)


@router.get("/quotations/{quotation_id}")
async def get_quotation(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return asdict(service.get_quotation(quotation_id))


@router.get("/quotations/{quotation_id}/details")
async def get_quotation_details(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    """Quotation with ordered rooms, line items and installation charges."""
    return service.get_quotation_details(quotation_id)


@router.put("/quotations/{quotation_id}")
async def update_quotation(
    quotation_id: int,
    payload: QuotationUpdate,
    service: QuotationService = Depends(get_quotation_service),
):
    quotation = service.update_quotation_details(quotation_id, _changes(payload))
    return asdict(quotation)


@router.put("/quotations/{quotation_id}/policy")
async def update_quotation_policy(
    quotation_id: int,
    payload: PolicyUpdate,
    service: QuotationService = Depends(get_quotation_service),
):
    """Change global discount, GST or handling; totals are recomputed before returning."""
    quotation = service.update_quotation_policy(quotation_id, **payload.model_dump(exclude_none=True))
    return asdict(quotation)


@router.put("/quotations/{quotation_id}/status")
async def update_quotation_status(
    quotation_id: int,
    payload: StatusUpdate,
    service: QuotationService = Depends(get_quotation_service),
):
    return asdict(service.update_quotation_status(quotation_id, payload.status))


@router.delete("/quotations/{quotation_id}", status_code=204)
async def delete_quotation(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    service.delete_quotation(quotation_id)


@router.post("/quotations/{quotation_id}/duplicate", status_code=201)
async def duplicate_quotation(
    quotation_id: int,
    payload: Optional[DuplicateRequest] = None,
    service: QuotationService = Depends(get_quotation_service),
):
    customer_id = payload.customer_id if payload else None
    return asdict(service.duplicate_quotation(quotation_id, customer_id))


@router.get("/quotations/{quotation_id}/summary")
async def get_quotation_summary(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    """Cached totals plus display strings (rounded to whole rupees)."""
    q = service.get_quotation(quotation_id)
    subtotal = q.final_price - q.gst_amount
    totals = {
        "total_selling_price": q.total_selling_price,
        "total_discounted_price": q.total_discounted_price,
        "total_installation_charges": q.total_installation_charges,
        "installation_handling": q.installation_handling,
        "subtotal": subtotal,
        "gst_amount": q.gst_amount,
        "final_price": q.final_price,
    }
    return {
        "quotation_id": q.id,
        "quotation_number": q.quotation_number,
        "global_discount": q.global_discount,
        "gst_percentage": q.gst_percentage,
        "totals": totals,
        "formatted": {name: format_currency(value) for name, value in totals.items()},
        "final_price_in_words": amount_in_words(q.final_price),
    }


@router.get("/quotations/{quotation_id}/validation")
async def get_quotation_validation(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    details = service.get_quotation_details(quotation_id)
    result = validate_quotation(details, config.REQUIRED_ACCESSORIES)
    return asdict(result)


@router.get("/quotations/{quotation_id}/installation-charges")
async def list_quotation_installation_charges(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return [service.charge_to_dict(c) for c in service.list_quotation_installation_charges(quotation_id)]


# ─── Rooms ──────────────────────────────────────────────────────────────────

@router.get("/quotations/{quotation_id}/rooms")
async def list_rooms(
    quotation_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return [asdict(r) for r in service.list_rooms(quotation_id)]


@router.post("/quotations/{quotation_id}/rooms", status_code=201)
async def create_room(
    quotation_id: int,
    payload: RoomCreate,
    service: QuotationService = Depends(get_quotation_service),
):
    room = service.create_room(quotation_id, payload.name, payload.description, payload.position)
    return asdict(room)


@router.post("/quotations/{quotation_id}/rooms/reorder")
async def reorder_rooms(
    quotation_id: int,
    payload: RoomReorder,
    service: QuotationService = Depends(get_quotation_service),
):
    return [asdict(r) for r in service.reorder_rooms(quotation_id, payload.room_ids)]


@router.get("/rooms/{room_id}")
async def get_room(
    room_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return service.room_details(service.get_room(room_id))


@router.put("/rooms/{room_id}")
async def update_room(
    room_id: int,
    payload: RoomUpdate,
    service: QuotationService = Depends(get_quotation_service),
):
    return asdict(service.update_room(room_id, _changes(payload)))


@router.delete("/rooms/{room_id}", status_code=204)
async def delete_room(
    room_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    service.delete_room(room_id)
