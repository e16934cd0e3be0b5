from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from sqlalchemy.orm import Session

from skuhub.config import settings
from skuhub.exceptions import NotFoundError, ValidationError
from skuhub.models.price_change import PriceChangeAudit
from skuhub.models.product import Product, ProductVariant
from skuhub.repositories.price_audit_repo import PriceAuditRepository
from skuhub.repositories.product_repo import ProductRepository
from skuhub.utils.logging import get_logger
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.pricing", "PRICE")


def validate_price_cents(price_cents) -> int:
    if isinstance(price_cents, bool) or not isinstance(price_cents, int):
        raise ValidationError("Price must be a whole number of cents")
    if price_cents < 0 or price_cents > settings.MAX_PRICE_CENTS:
        raise ValidationError(f"Price must be between 0 and {settings.MAX_PRICE_CENTS} cents")
    return price_cents


@dataclass(frozen=True)
class PriceUpdateResult:
    updated_entity: Union[Product, ProductVariant]
    audit_row: PriceChangeAudit

    @property
    def target(self) -> str:
        return "variant" if isinstance(self.updated_entity, ProductVariant) else "product"


class PriceSyncAuditor:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.audits = PriceAuditRepository(db)

    @staticmethod
    def detect_override(original_cents: Optional[int], current_cents: Optional[int]) -> bool:
        """True when the price printed on a label differs from the stored one."""
        if original_cents is None or current_cents is None:
            return False
        return int(original_cents) != int(current_cents)

    def confirm_update(
        self,
        product_id: int,
        new_price_cents: int,
        reason: str,
        changed_by: Optional[str] = None,
        variant_id: Optional[int] = None,
        notes: Optional[str] = None,
        barcode_job_id: Optional[str] = None,
    ) -> PriceUpdateResult:
        """
        Set the price of exactly one entity (the variant when variant_id is
        given, the product otherwise) and append its audit row in the same
        transaction. Sibling variants are never touched.
        """
        new_price_cents = validate_price_cents(new_price_cents)
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required for a price change")

        with smart_transaction(self.db):
            product = self.products.get(product_id, lock=True)
            if not product:
                raise NotFoundError(f"Product {product_id} not found")

            if variant_id is not None:
                variant = self.products.get_variant(product_id, variant_id, lock=True)
                if not variant:
                    raise NotFoundError(f"Variant {variant_id} not found on product {product_id}")
                old_price = variant.price_cents
                variant.price_cents = new_price_cents
                entity = variant
            else:
                old_price = product.sell_price_cents
                product.sell_price_cents = new_price_cents
                entity = product

            audit = self.audits.append(
                product_id=product_id,
                variant_id=variant_id,
                old_price_cents=old_price,
                new_price_cents=new_price_cents,
                changed_by=changed_by,
                reason=reason,
                notes=notes,
                barcode_job_id=barcode_job_id,
            )
        log.info(
            "product=%s variant=%s price %s -> %s (%s)",
            product_id, variant_id, old_price, new_price_cents, reason,
        )
        return PriceUpdateResult(updated_entity=entity, audit_row=audit)

    def history(
        self,
        product_id: int,
        variant_id: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        if limit is None:
            limit = settings.PRICE_HISTORY_DEFAULT_LIMIT
        limit = max(1, min(int(limit), settings.PRICE_HISTORY_MAX_LIMIT))

        with smart_transaction(self.db):
            if not self.products.get(product_id):
                raise NotFoundError(f"Product {product_id} not found")
            rows = self.audits.list_for_product(product_id, variant_id=variant_id, limit=limit)

        return [
            {
                "id": r.id,
                "product_id": r.product_id,
                "variant_id": r.variant_id,
                "old_price_cents": r.old_price_cents,
                "new_price_cents": r.new_price_cents,
                "price_difference_cents": r.price_difference_cents,
                "changed_by": r.changed_by,
                "changed_at": r.changed_at,
                "reason": r.reason,
                "notes": r.notes,
                "barcode_job_id": r.barcode_job_id,
            }
            for r in rows
        ]
