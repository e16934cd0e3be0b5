from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)

from skuhub.db import Base


class SkuSequence(Base):
    __tablename__ = "sku_sequences"
    __table_args__ = (
        UniqueConstraint("business_id", "prefix", name="uq_sku_sequences_business_prefix"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    prefix = Column(String(64), nullable=False)
    # only ever moved by the upsert-increment in SkuSequenceRepository.next_value
    current_sequence = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
