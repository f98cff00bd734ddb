"""Installation charge routes."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotedesk.api.deps import get_quotation_service
from quotedesk.services.quotation_service import QuotationService

router = APIRouter(prefix="/api", tags=["Installation Charges"])


class InstallationChargeCreate(BaseModel):
    cabinet_type: str = Field(..., min_length=1)
    width_mm: float = Field(..., gt=0)
    height_mm: float = Field(..., gt=0)
    price_per_sqft: Optional[float] = Field(None, gt=0)


class InstallationChargeUpdate(BaseModel):
    cabinet_type: Optional[str] = Field(None, min_length=1)
    width_mm: Optional[float] = Field(None, gt=0)
    height_mm: Optional[float] = Field(None, gt=0)
    price_per_sqft: Optional[float] = Field(None, gt=0)


@router.get("/rooms/{room_id}/installation-charges")
async def list_installation_charges(
    room_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return [service.charge_to_dict(c) for c in service.list_installation_charges(room_id)]


@router.post("/rooms/{room_id}/installation-charges", status_code=201)
async def create_installation_charge(
    room_id: int,
    payload: InstallationChargeCreate,
    service: QuotationService = Depends(get_quotation_service),
):
    charge = service.create_installation_charge(room_id, **payload.model_dump())
    return service.charge_to_dict(charge)


@router.get("/installation-charges/{charge_id}")
async def get_installation_charge(
    charge_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    return service.charge_to_dict(service.get_installation_charge(charge_id))


@router.put("/installation-charges/{charge_id}")
async def update_installation_charge(
    charge_id: int,
    payload: InstallationChargeUpdate,
    service: QuotationService = Depends(get_quotation_service),
):
    charge = service.update_installation_charge(charge_id, payload.model_dump(exclude_none=True))
    return service.charge_to_dict(charge)


@router.delete("/installation-charges/{charge_id}", status_code=204)
async def delete_installation_charge(
    charge_id: int,
    service: QuotationService = Depends(get_quotation_service),
):
    service.delete_installation_charge(charge_id)
