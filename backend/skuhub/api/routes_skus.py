from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from skuhub.api.errors import http_error
from skuhub.db import get_db
from skuhub.exceptions import SkuHubError
from skuhub.services.sku_service import SkuSequenceGenerator

router = APIRouter(prefix="/api/businesses/{business_id}/skus", tags=["skus"])


class GenerateSkuIn(BaseModel):
    category_name: Optional[str] = None
    department_name: Optional[str] = None


@router.post("", summary="Generate the next SKU")
def generate_sku(business_id: int, payload: GenerateSkuIn, db: Session = Depends(get_db)):
    svc = SkuSequenceGenerator(db)
    try:
        sku = svc.generate(business_id, payload.category_name, payload.department_name)
    except SkuHubError as e:
        raise http_error(e)
    return {"sku": sku}


@router.get("/preview", summary="Preview the next SKU without consuming it")
def preview_sku(
    business_id: int,
    category_name: Optional[str] = Query(None),
    department_name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = SkuSequenceGenerator(db)
    try:
        return {"sku": svc.preview(business_id, category_name, department_name)}
    except SkuHubError as e:
        raise http_error(e)


@router.get("/pattern", summary="Describe the business SKU pattern")
def sku_pattern(
    business_id: int,
    category_name: Optional[str] = Query(None),
    department_name: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    svc = SkuSequenceGenerator(db)
    try:
        return svc.describe_pattern(business_id, category_name, department_name)
    except SkuHubError as e:
        raise http_error(e)
