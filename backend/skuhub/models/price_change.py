from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, event

from skuhub.db import Base


class PriceChangeAudit(Base):
    """
    One row per confirmed price update. Rows are append-only: the mapper
    events below refuse any UPDATE or DELETE issued through the ORM.
    """

    __tablename__ = "product_price_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=True, index=True)
    old_price_cents = Column(Integer, nullable=False)
    new_price_cents = Column(Integer, nullable=False)
    changed_by = Column(String(64), nullable=True)
    changed_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False, index=True)
    reason = Column(String(64), nullable=False)
    notes = Column(Text, nullable=True)
    barcode_job_id = Column(String(64), nullable=True)

    @property
    def price_difference_cents(self) -> int:
        return self.new_price_cents - self.old_price_cents


@event.listens_for(PriceChangeAudit, "before_update")
def _refuse_update(mapper, connection, target):
    raise RuntimeError("product_price_changes rows are append-only")


@event.listens_for(PriceChangeAudit, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise RuntimeError("product_price_changes rows are append-only")
