from typing import List, Optional, Union

from sqlalchemy.exc import IntegrityError as DBIntegrityError
from sqlalchemy.orm import Session

from skuhub.exceptions import DuplicateBarcodeError, IntegrityError, NotFoundError
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology, ProductBarcode
from skuhub.models.product import Product
from skuhub.repositories.barcode_repo import BarcodeRepository
from skuhub.repositories.product_repo import ProductRepository
from skuhub.utils.logging import get_logger
from skuhub.utils.symbology import normalize_code, parse_symbology
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.barcodes", "BARCODE")


class BarcodeRegistry:
    """
    Code -> product associations.

    Invariants kept here: a product has at most one primary barcode, and a
    product that has barcodes never loses its last one. A product with no
    barcodes at all (created by manual entry) is a valid state.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = BarcodeRepository(db)
        self.products = ProductRepository(db)

    def _product(self, product_id: int) -> Product:
        product = self.products.get(product_id, lock=True)
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def _barcode(self, product_id: int, barcode_id: int) -> ProductBarcode:
        barcode = self.repo.get(product_id, barcode_id)
        if not barcode:
            raise NotFoundError(f"Barcode {barcode_id} not found on product {product_id}")
        return barcode

    def list_by_product(self, product_id: int) -> List[ProductBarcode]:
        with smart_transaction(self.db):
            if not self.products.get(product_id):
                raise NotFoundError(f"Product {product_id} not found")
            return self.repo.list_by_product(product_id)

    def primary_for(self, product_id: int) -> Optional[ProductBarcode]:
        with smart_transaction(self.db):
            return self.repo.primary_for(product_id)

    def attach(
        self,
        product_id: int,
        code: str,
        symbology: Union[str, BarcodeSymbology],
        is_primary: bool = False,
        source: BarcodeSource = BarcodeSource.MANUAL,
        created_by: Optional[str] = None,
        label: Optional[str] = None,
    ) -> ProductBarcode:
        symbology = parse_symbology(symbology)
        code = normalize_code(code, symbology)
        try:
            with smart_transaction(self.db):
                self._product(product_id)
                if self.repo.count_for_product(product_id) == 0:
                    # first barcode is always primary
                    is_primary = True
                elif is_primary:
                    self.repo.demote_all(product_id)
                barcode = self.repo.add(
                    product_id,
                    code,
                    symbology,
                    is_primary=is_primary,
                    source=source,
                    created_by=created_by,
                    label=label,
                )
        except DBIntegrityError:
            # unique(code) lost to a concurrent writer
            log.warning("attach lost unique race: code=%s product=%s", code, product_id)
            raise DuplicateBarcodeError(code)
        log.info(
            "attached code=%s product=%s primary=%s source=%s",
            code, product_id, barcode.is_primary, source.value,
        )
        return barcode

    def detach(self, product_id: int, barcode_id: int) -> Optional[ProductBarcode]:
        """
        Remove a barcode. Returns the barcode promoted to primary in its place,
        if the removed one was primary.
        """
        promoted = None
        with smart_transaction(self.db):
            self._product(product_id)
            barcode = self._barcode(product_id, barcode_id)
            if self.repo.count_for_product(product_id) <= 1:
                raise IntegrityError(
                    f"Cannot remove barcode {barcode.code}: it is the only barcode "
                    f"on product {product_id}. Add another barcode first."
                )
            was_primary = barcode.is_primary
            self.repo.delete(barcode)
            if was_primary:
                promoted = self.repo.earliest_for(product_id)
                promoted.is_primary = True
                self.db.flush()
        log.info(
            "detached barcode=%s product=%s promoted=%s",
            barcode_id, product_id, promoted.id if promoted else None,
        )
        return promoted

    def set_primary(self, product_id: int, barcode_id: int) -> ProductBarcode:
        with smart_transaction(self.db):
            self._product(product_id)
            barcode = self._barcode(product_id, barcode_id)
            if barcode.is_primary:
                return barcode
            self.repo.demote_all(product_id, except_id=barcode.id)
            barcode.is_primary = True
            self.db.flush()
        log.info("primary barcode=%s product=%s", barcode_id, product_id)
        return barcode
