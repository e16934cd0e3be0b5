from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Session

from skuhub.exceptions import NotFoundError, ValidationError
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology
from skuhub.models.product import Product
from skuhub.repositories.product_repo import ProductRepository
from skuhub.repositories.template_repo import TemplateRepository
from skuhub.services.barcode_conflicts import (
    AddBarcodeResult,
    BarcodeConflict,
    BarcodeConflictResolver,
)
from skuhub.services.barcode_lookup import ScanSession, ScanState
from skuhub.services.price_sync import validate_price_cents
from skuhub.services.sku_service import SkuSequenceGenerator
from skuhub.services.template_usage import TemplateUsageTracker
from skuhub.utils.logging import get_logger
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.intake", "INTAKE")


@dataclass(frozen=True)
class IntakeResult:
    product: Optional[Product] = None
    barcode: Optional[AddBarcodeResult] = None

    @property
    def conflict(self) -> Optional[BarcodeConflict]:
        return self.barcode if isinstance(self.barcode, BarcodeConflict) else None


class _Abort(Exception):
    def __init__(self, conflict: BarcodeConflict):
        self.conflict = conflict


class ProductIntakeService:
    """
    Create a product from the scan workflow: SKU generated when none is given,
    the scanned code attached through the conflict check, and template usage
    tracked once everything has committed.
    """

    def __init__(self, db: Session, tracker: Optional[TemplateUsageTracker] = None):
        self.db = db
        self.products = ProductRepository(db)
        self.templates = TemplateRepository(db)
        self.skus = SkuSequenceGenerator(db)
        self.conflicts = BarcodeConflictResolver(db)
        self.tracker = tracker or TemplateUsageTracker()

    def create_product(
        self,
        business_id: int,
        name: str,
        sell_price_cents: int = 0,
        sku: Optional[str] = None,
        category_id: Optional[str] = None,
        category_name: Optional[str] = None,
        department_name: Optional[str] = None,
        code: Optional[str] = None,
        symbology: Union[str, BarcodeSymbology] = BarcodeSymbology.CODE128,
        replace_conflict: bool = False,
        template_id: Optional[int] = None,
        created_by: Optional[str] = None,
        scan: Optional[ScanSession] = None,
    ) -> IntakeResult:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name is required")
        validate_price_cents(sell_price_cents)
        if scan is not None:
            scan.advance(ScanState.CREATION_PENDING)

        try:
            with smart_transaction(self.db):
                if not self.products.get_business(business_id):
                    raise NotFoundError(f"Business {business_id} not found")
                if template_id is not None and not self.templates.get(template_id):
                    raise NotFoundError(f"Template {template_id} not found")

                sku = (sku or "").strip() or self.skus.generate(
                    business_id, category_name, department_name
                )
                product = self.products.create(
                    business_id, sku, name, sell_price_cents, category_id=category_id
                )

                added = None
                if code:
                    added = self.conflicts.add_with_conflict_check(
                        product.id,
                        code,
                        symbology,
                        is_primary=True,
                        replace_conflict=replace_conflict,
                        source=BarcodeSource.MANUAL,
                        created_by=created_by,
                    )
                    if isinstance(added, BarcodeConflict):
                        # undo the new product and its sequence bump
                        raise _Abort(added)

                if template_id is not None:
                    self.tracker.track_after_commit(self.db, template_id, product.id)
        except _Abort as abort:
            log.info(
                "product %r not created: code %s held by product=%s",
                name, code, abort.conflict.holder_product_id,
            )
            return IntakeResult(barcode=abort.conflict)

        if scan is not None:
            scan.advance(ScanState.CREATED)
        log.info("created product=%s sku=%s business=%s", product.id, product.sku, business_id)
        return IntakeResult(product=product, barcode=added)
