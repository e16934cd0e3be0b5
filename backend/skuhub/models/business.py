from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from skuhub.config import settings
from skuhub.db import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    sku_prefix = Column(String(16), nullable=True)
    sku_format = Column(String(64), nullable=False, default=settings.SKU_DEFAULT_FORMAT)
    sku_digits = Column(Integer, nullable=False, default=settings.SKU_DEFAULT_DIGITS)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<Business id={self.id} name={self.name}>"
