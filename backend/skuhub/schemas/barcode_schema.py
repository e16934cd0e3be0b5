from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from skuhub.models.barcode import BarcodeSource, BarcodeSymbology


class BarcodeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    code: str
    symbology: BarcodeSymbology
    is_primary: bool
    source: BarcodeSource
    label: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime


class AddBarcodeIn(BaseModel):
    code: str
    symbology: str = "CODE128"
    is_primary: bool = False
    replace_conflict: bool = False
    source: BarcodeSource = BarcodeSource.MANUAL
    label: Optional[str] = None
    created_by: Optional[str] = None


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    business_id: int
    name: str
    barcode_value: str
    symbology: str
    custom_data: Optional[Dict[str, Any]] = None
    usage_count: int
    last_used_at: Optional[datetime] = None


class TemplateUsageIn(BaseModel):
    product_id: int
