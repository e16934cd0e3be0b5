from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from skuhub.db import Base
from skuhub.models.business import Business


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    sku = Column(String(64), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    sell_price_cents = Column(Integer, nullable=False, default=0)
    category_id = Column(String(64), nullable=True)
    created_from_template_id = Column(
        Integer, ForeignKey("barcode_templates.id"), nullable=True
    )
    template_linked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    business = relationship(Business)
    variants = relationship(
        "ProductVariant", back_populates="product", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Product sku={self.sku} name={self.name}>"


class ProductVariant(Base):
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    sku = Column(String(64), nullable=True)
    name = Column(String(128), nullable=True)
    price_cents = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="variants")
