# backend/skuhub/schemas/product_schema.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    business_id: int
    sku: str
    name: str
    sell_price_cents: int
    category_id: Optional[str] = None
    created_from_template_id: Optional[int] = None
    template_linked_at: Optional[datetime] = None

class VariantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    sku: Optional[str] = None
    name: Optional[str] = None
    price_cents: int

class ProductCreateIn(BaseModel):
    business_id: int
    name: str = Field(..., min_length=1, max_length=256)
    sell_price_cents: int = Field(0, ge=0)
    sku: Optional[str] = Field(None, max_length=64)
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    department_name: Optional[str] = None
    code: Optional[str] = None
    symbology: str = "CODE128"
    replace_conflict: bool = False
    template_id: Optional[int] = None
    created_by: Optional[str] = None
