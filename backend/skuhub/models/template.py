from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String

from skuhub.db import Base


class BarcodeTemplate(Base):
    __tablename__ = "barcode_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    barcode_value = Column(String(255), nullable=False, index=True)
    # stored lower-case as label printers name them: code128, ean13, upca ...
    symbology = Column(String(32), nullable=False, default="code128")
    # name / price / size / category / department
    custom_data = Column(JSON, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
