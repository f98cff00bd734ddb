"""
Product and accessory routes.

Both kinds share one record type and one set of handlers; each kind gets its
own URL space (``/api/rooms/{id}/products``, ``/api/products/{id}`` …) so a
product id can never be updated through the accessory endpoints.
"""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from quotedesk.api.deps import get_quotation_service
from quotedesk.models.records import DiscountType, LineItemKind
from quotedesk.services.quotation_service import QuotationService

router = APIRouter(prefix="/api", tags=["Line Items"])


# ─── Pydantic schemas ────────────────────────────────────────────────────────

class LineItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    selling_price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    discount: float = Field(0.0, ge=0)
    discount_type: DiscountType = DiscountType.PERCENTAGE


class LineItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    selling_price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=1)
    discount: Optional[float] = Field(None, ge=0)
    discount_type: Optional[DiscountType] = None


_NON_NULLABLE = {"name", "selling_price", "quantity", "discount", "discount_type"}


def _mount(kind: LineItemKind, collection: str) -> None:
    @router.get(f"/rooms/{{room_id}}/{collection}", name=f"list_{collection}")
    async def list_items(
        room_id: int,
        service: QuotationService = Depends(get_quotation_service),
    ):
        return [asdict(i) for i in service.list_line_items(room_id, kind)]

    @router.post(f"/rooms/{{room_id}}/{collection}", status_code=201, name=f"create_{kind.value}")
    async def create_item(
        room_id: int,
        payload: LineItemCreate,
        service: QuotationService = Depends(get_quotation_service),
    ):
        item = service.create_line_item(room_id, kind, **payload.model_dump())
        return asdict(item)

    @router.get(f"/{collection}/{{item_id}}", name=f"get_{kind.value}")
    async def get_item(
        item_id: int,
        service: QuotationService = Depends(get_quotation_service),
    ):
        return asdict(service.get_line_item(item_id, kind))

    @router.put(f"/{collection}/{{item_id}}", name=f"update_{kind.value}")
    async def update_item(
        item_id: int,
        payload: LineItemUpdate,
        service: QuotationService = Depends(get_quotation_service),
    ):
        changes = {
            name: value
            for name, value in payload.model_dump(exclude_unset=True).items()
            if value is not None or name not in _NON_NULLABLE
        }
        return asdict(service.update_line_item(item_id, changes, kind))

    @router.delete(f"/{collection}/{{item_id}}", status_code=204, name=f"delete_{kind.value}")
    async def delete_item(
        item_id: int,
        service: QuotationService = Depends(get_quotation_service),
    ):
        service.delete_line_item(item_id, kind)


_mount(LineItemKind.PRODUCT, "products")
_mount(LineItemKind.ACCESSORY, "accessories")
