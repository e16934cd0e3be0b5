from typing import List, Optional

from sqlalchemy.orm import Session

from skuhub.models.price_change import PriceChangeAudit


class PriceAuditRepository:
    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        product_id: int,
        old_price_cents: int,
        new_price_cents: int,
        reason: str,
        changed_by: Optional[str] = None,
        variant_id: Optional[int] = None,
        notes: Optional[str] = None,
        barcode_job_id: Optional[str] = None,
    ) -> PriceChangeAudit:
        row = PriceChangeAudit(
            product_id=product_id,
            variant_id=variant_id,
            old_price_cents=old_price_cents,
            new_price_cents=new_price_cents,
            changed_by=changed_by,
            reason=reason,
            notes=notes,
            barcode_job_id=barcode_job_id,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def list_for_product(
        self, product_id: int, variant_id: Optional[int] = None, limit: int = 50
    ) -> List[PriceChangeAudit]:
        qry = self.db.query(PriceChangeAudit).filter(
            PriceChangeAudit.product_id == product_id
        )
        if variant_id is not None:
            qry = qry.filter(PriceChangeAudit.variant_id == variant_id)
        return (
            qry.order_by(PriceChangeAudit.changed_at.desc(), PriceChangeAudit.id.desc())
            .limit(limit)
            .all()
        )
