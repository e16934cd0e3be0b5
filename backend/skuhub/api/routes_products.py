from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from skuhub.api.errors import http_error
from skuhub.db import get_db
from skuhub.exceptions import SkuHubError
from skuhub.schemas.barcode_schema import BarcodeOut, TemplateUsageIn
from skuhub.schemas.product_schema import ProductCreateIn, ProductOut
from skuhub.services.product_intake import ProductIntakeService
from skuhub.services.template_usage import TemplateUsageTracker

router = APIRouter(tags=["products"])


@router.post("/api/products", summary="Create a product from a scan")
def create_product(payload: ProductCreateIn, db: Session = Depends(get_db)):
    svc = ProductIntakeService(db)
    try:
        res = svc.create_product(**payload.model_dump())
    except SkuHubError as e:
        raise http_error(e)
    if res.conflict:
        return JSONResponse(status_code=409, content=res.conflict.to_dict())
    body = {"product": ProductOut.model_validate(res.product).model_dump(mode="json")}
    if res.barcode is not None:
        body["barcode"] = BarcodeOut.model_validate(res.barcode.barcode).model_dump(mode="json")
    return JSONResponse(status_code=201, content=body)


@router.post(
    "/api/templates/{template_id}/usage",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Record that a product was created from a template",
)
def track_template_usage(template_id: int, payload: TemplateUsageIn):
    # accepted before it runs; failures only show up in the log
    TemplateUsageTracker().dispatch(template_id, payload.product_id)
    return {"accepted": True}
