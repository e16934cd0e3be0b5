import enum
import re
from typing import Dict, Optional

from sqlalchemy.orm import Session

from skuhub.exceptions import NotFoundError, ValidationError
from skuhub.models.business import Business
from skuhub.repositories.product_repo import ProductRepository
from skuhub.repositories.sku_sequence_repo import SkuSequenceRepository
from skuhub.utils.logging import get_logger
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.sku", "SKU")

MIN_DIGITS = 1
MAX_DIGITS = 12
SEGMENT_LENGTH = 3


class SkuFormat(enum.Enum):
    BUSINESS = "{BUSINESS}-{SEQ}"
    CATEGORY = "{CATEGORY}-{SEQ}"
    DEPARTMENT = "{DEPARTMENT}-{SEQ}"
    BUSINESS_CATEGORY = "{BUSINESS}-{CATEGORY}-{SEQ}"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SkuFormat":
        try:
            return cls((value or "").strip())
        except ValueError:
            raise ValidationError(f"Unknown SKU format: {value!r}")


def abbreviate(name: Optional[str], length: int = SEGMENT_LENGTH) -> str:
    """'Hot Drinks' -> 'HOT', 'a-1 b' -> 'A1B'; empty when nothing alphanumeric remains."""
    return re.sub(r"[^A-Za-z0-9]", "", name or "")[:length].upper()


class SkuSequenceGenerator:
    """
    Human-readable SKUs backed by a per-(business, prefix) counter.

    `generate` consumes a sequence number through a single upsert-increment
    statement, so concurrent callers for the same prefix always get distinct
    numbers. `preview` only reads, and its answer may already be stale when the
    caller uses it.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.sequences = SkuSequenceRepository(db)

    def _business(self, business_id: int) -> Business:
        business = self.products.get_business(business_id)
        if not business:
            raise NotFoundError(f"Business {business_id} not found")
        return business

    def _business_prefix(self, business: Business) -> str:
        prefix = (business.sku_prefix or "").strip().upper() or abbreviate(business.name)
        if not prefix:
            raise ValidationError(f"Business {business.id} has no usable SKU prefix")
        return prefix

    def _digits(self, business: Business) -> int:
        digits = business.sku_digits
        if digits is None or not (MIN_DIGITS <= digits <= MAX_DIGITS):
            raise ValidationError(
                f"SKU digits must be between {MIN_DIGITS} and {MAX_DIGITS}, got {digits}"
            )
        return digits

    def build_prefix(
        self,
        business: Business,
        category_name: Optional[str] = None,
        department_name: Optional[str] = None,
    ) -> str:
        fmt = SkuFormat.parse(business.sku_format)
        base = self._business_prefix(business)
        category = abbreviate(category_name)
        department = abbreviate(department_name)

        if fmt is SkuFormat.BUSINESS:
            return base
        if fmt is SkuFormat.CATEGORY:
            return category or base
        if fmt is SkuFormat.DEPARTMENT:
            return department or base
        if fmt is SkuFormat.BUSINESS_CATEGORY:
            return f"{base}-{category}" if category else base
        raise ValidationError(f"Unhandled SKU format: {fmt}")

    @staticmethod
    def format_sku(prefix: str, sequence: int, digits: int) -> str:
        return f"{prefix}-{sequence:0{digits}d}"

    def generate(
        self,
        business_id: int,
        category_name: Optional[str] = None,
        department_name: Optional[str] = None,
    ) -> str:
        with smart_transaction(self.db):
            business = self._business(business_id)
            prefix = self.build_prefix(business, category_name, department_name)
            digits = self._digits(business)
            seq = self.sequences.next_value(business.id, prefix)
        sku = self.format_sku(prefix, seq, digits)
        log.info("generated %s for business=%s", sku, business_id)
        return sku

    def preview(
        self,
        business_id: int,
        category_name: Optional[str] = None,
        department_name: Optional[str] = None,
    ) -> str:
        with smart_transaction(self.db):
            business = self._business(business_id)
            prefix = self.build_prefix(business, category_name, department_name)
            digits = self._digits(business)
            nxt = self.sequences.current_value(business.id, prefix) + 1
        return self.format_sku(prefix, nxt, digits)

    def describe_pattern(
        self,
        business_id: int,
        category_name: Optional[str] = None,
        department_name: Optional[str] = None,
    ) -> Dict:
        with smart_transaction(self.db):
            business = self._business(business_id)
            prefix = self.build_prefix(business, category_name, department_name)
            digits = self._digits(business)
        return {
            "format": SkuFormat.parse(business.sku_format).value,
            "prefix": prefix,
            "digits": digits,
            "sample": self.format_sku(prefix, 1, digits),
            "next": self.preview(business_id, category_name, department_name),
        }
