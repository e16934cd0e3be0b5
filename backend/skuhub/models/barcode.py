import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)

from skuhub.db import Base


class BarcodeSymbology(enum.Enum):
    UPC_A = "UPC_A"
    UPC_E = "UPC_E"
    EAN_13 = "EAN_13"
    EAN_8 = "EAN_8"
    CODE128 = "CODE128"
    CODE39 = "CODE39"
    ITF = "ITF"
    CODABAR = "CODABAR"
    MSI = "MSI"
    PHARMACODE = "PHARMACODE"
    QR_CODE = "QR_CODE"
    DATA_MATRIX = "DATA_MATRIX"
    PDF417 = "PDF417"
    CUSTOM = "CUSTOM"
    SKU_BARCODE = "SKU_BARCODE"


class BarcodeSource(enum.Enum):
    MANUAL = "MANUAL"
    LABEL_PRINT = "LABEL_PRINT"
    IMPORT = "IMPORT"


class ProductBarcode(Base):
    __tablename__ = "product_barcodes"
    __table_args__ = (
        # at most one primary per product; backs the demote-then-promote paths
        Index(
            "uq_product_barcodes_one_primary",
            "product_id",
            unique=True,
            sqlite_where=text("is_primary = 1"),
            postgresql_where=text("is_primary"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    code = Column(String(255), unique=True, nullable=False, index=True)
    symbology = Column(Enum(BarcodeSymbology), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    source = Column(Enum(BarcodeSource), nullable=False, default=BarcodeSource.MANUAL)
    label = Column(String(255), nullable=True)
    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<ProductBarcode code={self.code} product={self.product_id} primary={self.is_primary}>"
