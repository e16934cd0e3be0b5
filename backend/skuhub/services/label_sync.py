from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy.orm import Session

from skuhub.config import settings
from skuhub.exceptions import IntegrityError, ValidationError
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology
from skuhub.services.barcode_conflicts import (
    AddBarcodeResult,
    BarcodeConflict,
    BarcodeConflictResolver,
)
from skuhub.services.price_sync import PriceSyncAuditor, PriceUpdateResult
from skuhub.utils.logging import get_logger

log = get_logger("skuhub.labels", "LABEL")


@dataclass(frozen=True)
class LabelSyncResult:
    price_overridden: bool
    price_update: Optional[PriceUpdateResult] = None
    barcode: Optional[AddBarcodeResult] = None
    barcode_error: Optional[str] = None


class LabelPriceSync:
    """
    What happens to inventory when a label is submitted for printing: a
    confirmed price override is written back (with its audit row), then the
    printed code is attached to the product. The attach is best effort:
    whatever stops it is reported in the result and never undoes the price
    update.
    """

    def __init__(self, db: Session):
        self.db = db
        self.pricing = PriceSyncAuditor(db)
        self.conflicts = BarcodeConflictResolver(db)

    def submit(
        self,
        product_id: int,
        code: Optional[str],
        symbology: Union[str, BarcodeSymbology],
        original_price_cents: Optional[int],
        printed_price_cents: Optional[int],
        confirm_price_update: bool = False,
        variant_id: Optional[int] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        barcode_job_id: Optional[str] = None,
        template_name: Optional[str] = None,
        changed_by: Optional[str] = None,
    ) -> LabelSyncResult:
        overridden = self.pricing.detect_override(original_price_cents, printed_price_cents)
        update = None
        if overridden and confirm_price_update:
            update = self.pricing.confirm_update(
                product_id,
                printed_price_cents,
                reason or settings.DEFAULT_PRICE_CHANGE_REASON,
                changed_by=changed_by,
                variant_id=variant_id,
                notes=notes,
                barcode_job_id=barcode_job_id,
            )

        if not code:
            return LabelSyncResult(price_overridden=overridden, price_update=update)

        label = f"Generated from {template_name}" if template_name else None
        try:
            added = self.conflicts.add_with_conflict_check(
                product_id,
                code,
                symbology,
                source=BarcodeSource.LABEL_PRINT,
                created_by=changed_by,
                label=label,
            )
        except (ValidationError, IntegrityError) as e:
            # a malformed printed code or a refused move; the print job still goes out
            log.warning("auto-attach of %s to product=%s failed: %s", code, product_id, e)
            return LabelSyncResult(
                price_overridden=overridden, price_update=update, barcode_error=str(e)
            )

        if isinstance(added, BarcodeConflict):
            log.warning(
                "printed code %s already belongs to product=%s; not attached to product=%s",
                code, added.holder_product_id, product_id,
            )
        return LabelSyncResult(price_overridden=overridden, price_update=update, barcode=added)
