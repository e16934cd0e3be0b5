from typing import Iterable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from skuhub.models.barcode import BarcodeSource, BarcodeSymbology, ProductBarcode
from skuhub.models.product import Product


class BarcodeRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_by_product(self, product_id: int) -> List[ProductBarcode]:
        return (
            self.db.query(ProductBarcode)
            .filter(ProductBarcode.product_id == product_id)
            .order_by(
                ProductBarcode.is_primary.desc(),
                ProductBarcode.created_at.asc(),
                ProductBarcode.id.asc(),
            )
            .all()
        )

    def get(self, product_id: int, barcode_id: int) -> Optional[ProductBarcode]:
        return (
            self.db.query(ProductBarcode)
            .filter(
                ProductBarcode.id == barcode_id,
                ProductBarcode.product_id == product_id,
            )
            .first()
        )

    def get_by_code(self, code: str) -> Optional[ProductBarcode]:
        return self.db.query(ProductBarcode).filter(ProductBarcode.code == code).first()

    def count_for_product(self, product_id: int) -> int:
        return (
            self.db.query(func.count(ProductBarcode.id))
            .filter(ProductBarcode.product_id == product_id)
            .scalar()
            or 0
        )

    def primary_for(self, product_id: int) -> Optional[ProductBarcode]:
        return (
            self.db.query(ProductBarcode)
            .filter(
                ProductBarcode.product_id == product_id,
                ProductBarcode.is_primary == True,
            )
            .first()
        )

    def earliest_for(self, product_id: int) -> Optional[ProductBarcode]:
        return (
            self.db.query(ProductBarcode)
            .filter(ProductBarcode.product_id == product_id)
            .order_by(ProductBarcode.created_at.asc(), ProductBarcode.id.asc())
            .first()
        )

    def find_products_by_code(
        self, code: str, business_ids: Optional[Iterable[int]] = None
    ) -> List[tuple]:
        """
        Return (ProductBarcode, Product) pairs for `code`, primary barcodes first,
        then oldest. `business_ids=None` means every business.
        """
        qry = (
            self.db.query(ProductBarcode, Product)
            .join(Product, Product.id == ProductBarcode.product_id)
            .filter(ProductBarcode.code == code)
        )
        if business_ids is not None:
            qry = qry.filter(Product.business_id.in_(list(business_ids)))
        return qry.order_by(
            ProductBarcode.is_primary.desc(),
            ProductBarcode.created_at.asc(),
            ProductBarcode.id.asc(),
        ).all()

    def demote_all(self, product_id: int, except_id: Optional[int] = None):
        stmt = (
            update(ProductBarcode)
            .where(
                ProductBarcode.product_id == product_id,
                ProductBarcode.is_primary == True,
            )
            .values(is_primary=False)
        )
        if except_id is not None:
            stmt = stmt.where(ProductBarcode.id != except_id)
        self.db.execute(stmt)

    def add(
        self,
        product_id: int,
        code: str,
        symbology: BarcodeSymbology,
        is_primary: bool,
        source: BarcodeSource,
        created_by: Optional[str] = None,
        label: Optional[str] = None,
    ) -> ProductBarcode:
        b = ProductBarcode(
            product_id=product_id,
            code=code,
            symbology=symbology,
            is_primary=is_primary,
            source=source,
            created_by=created_by,
            label=label,
        )
        self.db.add(b)
        self.db.flush()
        return b

    def delete(self, barcode: ProductBarcode):
        self.db.delete(barcode)
        self.db.flush()
