from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from skuhub.models.product import Product
from skuhub.models.template import BarcodeTemplate


class TemplateRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, template_id: int) -> Optional[BarcodeTemplate]:
        return self.db.get(BarcodeTemplate, template_id)

    def find_by_value(
        self, barcode_value: str, business_ids: Optional[Iterable[int]] = None
    ) -> List[BarcodeTemplate]:
        qry = self.db.query(BarcodeTemplate).filter(
            BarcodeTemplate.barcode_value == barcode_value
        )
        if business_ids is not None:
            qry = qry.filter(BarcodeTemplate.business_id.in_(list(business_ids)))
        return qry.order_by(BarcodeTemplate.created_at.asc(), BarcodeTemplate.id.asc()).all()

    def record_usage(self, template_id: int, used_at: datetime) -> int:
        """Increment usage in the database itself; returns the number of rows touched."""
        res = self.db.execute(
            update(BarcodeTemplate)
            .where(BarcodeTemplate.id == template_id)
            .values(
                usage_count=BarcodeTemplate.usage_count + 1,
                last_used_at=used_at,
            )
        )
        return res.rowcount

    def link_product(self, product_id: int, template_id: int, linked_at: datetime) -> int:
        res = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(created_from_template_id=template_id, template_linked_at=linked_at)
        )
        return res.rowcount
