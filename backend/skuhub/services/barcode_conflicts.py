from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.orm import Session

from skuhub.exceptions import DuplicateBarcodeError, NotFoundError
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology, ProductBarcode
from skuhub.repositories.barcode_repo import BarcodeRepository
from skuhub.repositories.product_repo import ProductRepository
from skuhub.services.barcode_registry import BarcodeRegistry
from skuhub.utils.logging import get_logger
from skuhub.utils.symbology import normalize_code, parse_symbology
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.barcodes.conflicts", "BARCODE")


@dataclass(frozen=True)
class BarcodeAdded:
    barcode: ProductBarcode
    # False when the code was already on this product
    created: bool = True
    type: str = "ok"


@dataclass(frozen=True)
class BarcodeConflict:
    """The code belongs to another product; nothing was changed."""

    code: str
    holder_product_id: int
    holder_name: str
    holder_sku: str
    holder_business_id: int
    holder_business_name: Optional[str]
    barcode_id: int
    symbology: str
    is_primary: bool
    source: str
    created_at: Optional[datetime]
    type: str = "conflict"

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "code": self.code,
            "product": {
                "id": self.holder_product_id,
                "name": self.holder_name,
                "sku": self.holder_sku,
                "business_id": self.holder_business_id,
                "business_name": self.holder_business_name,
            },
            "barcode": {
                "id": self.barcode_id,
                "symbology": self.symbology,
                "is_primary": self.is_primary,
                "source": self.source,
                "created_at": self.created_at.isoformat() if self.created_at else None,
            },
        }


AddBarcodeResult = Union[BarcodeAdded, BarcodeConflict]


class BarcodeConflictResolver:
    """
    "Add barcode" as a three-outcome call: BarcodeAdded, BarcodeConflict (the
    caller decides and calls again with replace_conflict=True), or an
    IntegrityError when moving the code would strip the holder of its only
    barcode.
    """

    def __init__(self, db: Session):
        self.db = db
        self.registry = BarcodeRegistry(db)
        self.repo = BarcodeRepository(db)
        self.products = ProductRepository(db)

    def _conflict(self, held: ProductBarcode) -> BarcodeConflict:
        holder = self.products.get(held.product_id)
        business = self.products.get_business(holder.business_id)
        return BarcodeConflict(
            code=held.code,
            holder_product_id=holder.id,
            holder_name=holder.name,
            holder_sku=holder.sku,
            holder_business_id=holder.business_id,
            holder_business_name=business.name if business else None,
            barcode_id=held.id,
            symbology=held.symbology.value,
            is_primary=held.is_primary,
            source=held.source.value,
            created_at=held.created_at,
        )

    def add_with_conflict_check(
        self,
        product_id: int,
        code: str,
        symbology: Union[str, BarcodeSymbology],
        is_primary: bool = False,
        replace_conflict: bool = False,
        source: BarcodeSource = BarcodeSource.MANUAL,
        created_by: Optional[str] = None,
        label: Optional[str] = None,
    ) -> AddBarcodeResult:
        symbology = parse_symbology(symbology)
        code = normalize_code(code, symbology)

        try:
            with smart_transaction(self.db):
                if not self.products.get(product_id):
                    raise NotFoundError(f"Product {product_id} not found")
                held = self.repo.get_by_code(code)

                if held is not None and held.product_id == product_id:
                    if is_primary and not held.is_primary:
                        held = self.registry.set_primary(product_id, held.id)
                    return BarcodeAdded(barcode=held, created=False)

                if held is not None and not replace_conflict:
                    conflict = self._conflict(held)
                    log.info(
                        "conflict: code=%s requested by product=%s held by product=%s",
                        code, product_id, held.product_id,
                    )
                    return conflict

                if held is not None:
                    log.info(
                        "moving code=%s from product=%s to product=%s",
                        code, held.product_id, product_id,
                    )
                    self.registry.detach(held.product_id, held.id)

                barcode = self.registry.attach(
                    product_id,
                    code,
                    symbology,
                    is_primary=is_primary,
                    source=source,
                    created_by=created_by,
                    label=label,
                )
                return BarcodeAdded(barcode=barcode)
        except DuplicateBarcodeError:
            # a concurrent caller attached the code between our check and insert
            with smart_transaction(self.db):
                held = self.repo.get_by_code(code)
                if held is None or held.product_id == product_id:
                    raise
                return self._conflict(held)
