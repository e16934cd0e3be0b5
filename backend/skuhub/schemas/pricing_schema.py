from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PriceUpdateIn(BaseModel):
    new_price_cents: int
    variant_id: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    barcode_job_id: Optional[str] = None
    changed_by: Optional[str] = None


class PriceChangeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    variant_id: Optional[int] = None
    old_price_cents: int
    new_price_cents: int
    price_difference_cents: int
    changed_by: Optional[str] = None
    changed_at: datetime
    reason: str
    notes: Optional[str] = None
    barcode_job_id: Optional[str] = None


class LabelSyncIn(BaseModel):
    product_id: int
    variant_id: Optional[int] = None
    code: Optional[str] = None
    symbology: str = "CODE128"
    original_price_cents: Optional[int] = None
    printed_price_cents: Optional[int] = None
    confirm_price_update: bool = False
    reason: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=500)
    barcode_job_id: Optional[str] = None
    template_name: Optional[str] = None
    changed_by: Optional[str] = None
