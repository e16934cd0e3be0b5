from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from skuhub.api.errors import http_error
from skuhub.db import get_db
from skuhub.exceptions import SkuHubError
from skuhub.schemas.barcode_schema import AddBarcodeIn, BarcodeOut, TemplateOut
from skuhub.schemas.product_schema import ProductOut
from skuhub.services.barcode_conflicts import BarcodeConflict, BarcodeConflictResolver
from skuhub.services.barcode_lookup import BarcodeResolver, ProductMatch, TemplateMatch
from skuhub.services.barcode_registry import BarcodeRegistry

router = APIRouter(tags=["barcodes"])


def _barcode(b) -> dict:
    return BarcodeOut.model_validate(b).model_dump(mode="json")


@router.get("/api/barcodes/lookup", summary="Resolve a scanned code")
def lookup_barcode(
    code: str = Query(..., min_length=1),
    business_id: int = Query(...),
    scope: str = Query("current"),
    accessible_business_ids: Optional[List[int]] = Query(None),
    db: Session = Depends(get_db),
):
    svc = BarcodeResolver(db)
    try:
        res = svc.lookup(code, business_id, scope, accessible_business_ids)
    except SkuHubError as e:
        raise http_error(e)
    if isinstance(res, ProductMatch):
        return {
            "type": res.type,
            "product": ProductOut.model_validate(res.product).model_dump(mode="json"),
            "barcode": _barcode(res.barcode),
        }
    if isinstance(res, TemplateMatch):
        return {
            "type": res.type,
            "template": TemplateOut.model_validate(res.template).model_dump(mode="json"),
            "suggested_product": res.suggested_product,
        }
    return {"type": res.type, "code": res.code}


@router.get("/api/products/{product_id}/barcodes", summary="List product barcodes")
def list_barcodes(product_id: int, db: Session = Depends(get_db)):
    svc = BarcodeRegistry(db)
    try:
        return [_barcode(b) for b in svc.list_by_product(product_id)]
    except SkuHubError as e:
        raise http_error(e)


@router.post("/api/products/{product_id}/barcodes", summary="Add a barcode to a product")
def add_barcode(product_id: int, payload: AddBarcodeIn, db: Session = Depends(get_db)):
    svc = BarcodeConflictResolver(db)
    try:
        res = svc.add_with_conflict_check(
            product_id,
            payload.code,
            payload.symbology,
            is_primary=payload.is_primary,
            replace_conflict=payload.replace_conflict,
            source=payload.source,
            created_by=payload.created_by,
            label=payload.label,
        )
    except SkuHubError as e:
        raise http_error(e)
    if isinstance(res, BarcodeConflict):
        # caller resolves by re-posting with replace_conflict=true
        return JSONResponse(status_code=409, content=res.to_dict())
    return JSONResponse(
        status_code=201 if res.created else 200,
        content={"type": res.type, "created": res.created, "barcode": _barcode(res.barcode)},
    )


@router.delete("/api/products/{product_id}/barcodes/{barcode_id}", summary="Remove a barcode")
def delete_barcode(product_id: int, barcode_id: int, db: Session = Depends(get_db)):
    svc = BarcodeRegistry(db)
    try:
        promoted = svc.detach(product_id, barcode_id)
    except SkuHubError as e:
        raise http_error(e)
    return {"ok": True, "promoted_barcode_id": promoted.id if promoted else None}


@router.post(
    "/api/products/{product_id}/barcodes/{barcode_id}/primary",
    summary="Make a barcode the product's primary",
)
def set_primary_barcode(product_id: int, barcode_id: int, db: Session = Depends(get_db)):
    svc = BarcodeRegistry(db)
    try:
        return _barcode(svc.set_primary(product_id, barcode_id))
    except SkuHubError as e:
        raise http_error(e)
