from typing import Optional

from sqlalchemy.orm import Session

from skuhub.models.business import Business
from skuhub.models.product import Product, ProductVariant


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_business(self, business_id: int) -> Optional[Business]:
        return self.db.get(Business, business_id)

    def get(self, product_id: int, lock: bool = False) -> Optional[Product]:
        qry = self.db.query(Product).filter(Product.id == product_id)
        if lock:
            # row lock on PostgreSQL; SQLite serialises writers with BEGIN IMMEDIATE instead
            qry = qry.with_for_update()
        return qry.first()

    def get_variant(
        self, product_id: int, variant_id: int, lock: bool = False
    ) -> Optional[ProductVariant]:
        qry = self.db.query(ProductVariant).filter(
            ProductVariant.id == variant_id, ProductVariant.product_id == product_id
        )
        if lock:
            qry = qry.with_for_update()
        return qry.first()

    def get_by_sku(self, business_id: int, sku: str) -> Optional[Product]:
        return (
            self.db.query(Product)
            .filter(Product.business_id == business_id, Product.sku == sku)
            .first()
        )

    def create(
        self,
        business_id: int,
        sku: str,
        name: str,
        sell_price_cents: int = 0,
        category_id: Optional[str] = None,
    ) -> Product:
        p = Product(
            business_id=business_id,
            sku=sku,
            name=name,
            sell_price_cents=sell_price_cents,
            category_id=category_id,
        )
        self.db.add(p)
        self.db.flush()
        return p
