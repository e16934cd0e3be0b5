from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from skuhub.api.errors import http_error
from skuhub.config import settings
from skuhub.db import get_db
from skuhub.exceptions import SkuHubError
from skuhub.schemas.pricing_schema import LabelSyncIn, PriceChangeOut, PriceUpdateIn
from skuhub.services.barcode_conflicts import BarcodeConflict
from skuhub.services.label_sync import LabelPriceSync
from skuhub.services.price_sync import PriceSyncAuditor

router = APIRouter(tags=["pricing"])


def _audit(row) -> dict:
    return PriceChangeOut.model_validate(row).model_dump(mode="json")


@router.patch("/api/products/{product_id}/price", summary="Update a product or variant price")
def update_price(product_id: int, payload: PriceUpdateIn, db: Session = Depends(get_db)):
    svc = PriceSyncAuditor(db)
    try:
        res = svc.confirm_update(
            product_id,
            payload.new_price_cents,
            payload.reason or settings.DEFAULT_PRICE_CHANGE_REASON,
            changed_by=payload.changed_by,
            variant_id=payload.variant_id,
            notes=payload.notes,
            barcode_job_id=payload.barcode_job_id,
        )
    except SkuHubError as e:
        raise http_error(e)
    return {
        "target": res.target,
        "id": res.updated_entity.id,
        "audit": _audit(res.audit_row),
        "message": f"Price updated from {res.audit_row.old_price_cents} to {res.audit_row.new_price_cents}",
    }


@router.get("/api/products/{product_id}/price-history", summary="Price change history")
def price_history(
    product_id: int,
    variant_id: Optional[int] = Query(None),
    limit: int = Query(settings.PRICE_HISTORY_DEFAULT_LIMIT, ge=1),
    db: Session = Depends(get_db),
):
    svc = PriceSyncAuditor(db)
    try:
        rows = svc.history(product_id, variant_id=variant_id, limit=limit)
    except SkuHubError as e:
        raise http_error(e)
    return {"items": [PriceChangeOut.model_validate(r).model_dump(mode="json") for r in rows]}


@router.post("/api/labels/price-sync", summary="Sync a label submission back to inventory")
def label_price_sync(payload: LabelSyncIn, db: Session = Depends(get_db)):
    svc = LabelPriceSync(db)
    try:
        res = svc.submit(**payload.model_dump())
    except SkuHubError as e:
        raise http_error(e)

    barcode = None
    if isinstance(res.barcode, BarcodeConflict):
        barcode = res.barcode.to_dict()
    elif res.barcode is not None:
        barcode = {"type": res.barcode.type, "created": res.barcode.created, "id": res.barcode.barcode.id}
    return {
        "price_overridden": res.price_overridden,
        "audit": _audit(res.price_update.audit_row) if res.price_update else None,
        "barcode": barcode,
        "barcode_error": res.barcode_error,
    }
