import enum
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Union

from sqlalchemy.orm import Session

from skuhub.exceptions import ValidationError
from skuhub.models.barcode import ProductBarcode
from skuhub.models.product import Product
from skuhub.models.template import BarcodeTemplate
from skuhub.repositories.barcode_repo import BarcodeRepository
from skuhub.repositories.template_repo import TemplateRepository
from skuhub.services.sku_service import SkuSequenceGenerator
from skuhub.utils.logging import get_logger
from skuhub.utils.transactions import smart_transaction

log = get_logger("skuhub.lookup", "LOOKUP")

SCOPE_CURRENT = "current"
SCOPE_GLOBAL = "global"


@dataclass(frozen=True)
class ProductMatch:
    product: Product
    barcode: ProductBarcode
    type: str = "product"


@dataclass(frozen=True)
class TemplateMatch:
    template: BarcodeTemplate
    suggested_product: Dict
    type: str = "template"


@dataclass(frozen=True)
class NotFound:
    code: str
    type: str = "not_found"


LookupResult = Union[ProductMatch, TemplateMatch, NotFound]


def parse_price_cents(raw) -> Optional[int]:
    """Template prices are free text ("12.50", "$3", 4); None when unparseable."""
    if raw is None or raw == "":
        return None
    try:
        value = Decimal(str(raw).replace("$", "").replace(",", "").strip())
    except InvalidOperation:
        return None
    if value < 0:
        return None
    return int((value * 100).quantize(Decimal("1")))


class BarcodeResolver:
    """
    Three-tier scan lookup: a product holding the code, else a label template
    carrying it, else a miss. Product matches always win over templates.
    """

    def __init__(self, db: Session):
        self.db = db
        self.barcodes = BarcodeRepository(db)
        self.templates = TemplateRepository(db)
        self.skus = SkuSequenceGenerator(db)

    @staticmethod
    def _scope_ids(
        business_id: int, scope: str, accessible_business_ids: Optional[Iterable[int]]
    ) -> Optional[List[int]]:
        if scope == SCOPE_CURRENT:
            return [business_id]
        if scope == SCOPE_GLOBAL:
            # None means every business; the caller has already decided access
            return None if accessible_business_ids is None else list(accessible_business_ids)
        raise ValidationError(f"Unknown lookup scope: {scope!r}")

    @staticmethod
    def _prefer_business(rows: list, business_id: int, key) -> list:
        # stable sort keeps the repository's ordering inside each group
        return sorted(rows, key=lambda r: 0 if key(r) == business_id else 1)

    def suggest_product(self, template: BarcodeTemplate) -> Dict:
        data = template.custom_data or {}
        category = data.get("category")
        department = data.get("department")
        try:
            suggested_sku = self.skus.preview(template.business_id, category, department)
        except ValidationError as e:
            # the scan still resolves; the form asks for a SKU instead
            log.warning("no SKU suggestion for template=%s: %s", template.id, e)
            suggested_sku = None
        return {
            "name": data.get("name") or data.get("productName") or template.name,
            "price_cents": parse_price_cents(data.get("price")),
            "size": data.get("size"),
            "category": category,
            "department": department,
            "barcode": template.barcode_value,
            "symbology": template.symbology,
            "template_id": template.id,
            "business_id": template.business_id,
            "suggested_sku": suggested_sku,
        }

    def lookup(
        self,
        code: str,
        business_id: int,
        scope: str = SCOPE_CURRENT,
        accessible_business_ids: Optional[Iterable[int]] = None,
    ) -> LookupResult:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Barcode code is required")
        business_ids = self._scope_ids(business_id, scope, accessible_business_ids)

        with smart_transaction(self.db):
            matches = self.barcodes.find_products_by_code(code, business_ids)
            if matches:
                barcode, product = self._prefer_business(
                    matches, business_id, key=lambda r: r[1].business_id
                )[0]
                log.debug("code=%s -> product=%s", code, product.id)
                return ProductMatch(product=product, barcode=barcode)

            templates = self.templates.find_by_value(code, business_ids)
            if templates:
                template = self._prefer_business(
                    templates, business_id, key=lambda t: t.business_id
                )[0]
                log.debug("code=%s -> template=%s", code, template.id)
                return TemplateMatch(template=template, suggested_product=self.suggest_product(template))

        log.debug("code=%s -> not found", code)
        return NotFound(code=code)


class ScanState(enum.Enum):
    SCANNED = "SCANNED"
    PRODUCT_FOUND = "PRODUCT_FOUND"
    TEMPLATE_FOUND = "TEMPLATE_FOUND"
    CREATION_PENDING = "CREATION_PENDING"
    CREATED = "CREATED"
    NOT_FOUND = "NOT_FOUND"
    MANUAL_ENTRY = "MANUAL_ENTRY"


SCAN_TRANSITIONS = {
    ScanState.SCANNED: {ScanState.PRODUCT_FOUND, ScanState.TEMPLATE_FOUND, ScanState.NOT_FOUND},
    ScanState.TEMPLATE_FOUND: {ScanState.CREATION_PENDING},
    ScanState.CREATION_PENDING: {ScanState.CREATED},
    ScanState.NOT_FOUND: {ScanState.MANUAL_ENTRY},
    ScanState.PRODUCT_FOUND: set(),
    ScanState.CREATED: set(),
    ScanState.MANUAL_ENTRY: set(),
}

_RESULT_STATES = {
    "product": ScanState.PRODUCT_FOUND,
    "template": ScanState.TEMPLATE_FOUND,
    "not_found": ScanState.NOT_FOUND,
}


@dataclass
class ScanSession:
    """Where one scan is in the downstream workflow."""

    code: str
    state: ScanState = ScanState.SCANNED
    result: Optional[LookupResult] = None
    history: List[ScanState] = field(default_factory=list)

    @property
    def terminal(self) -> bool:
        return not SCAN_TRANSITIONS[self.state]

    def advance(self, new_state: ScanState) -> "ScanSession":
        if new_state not in SCAN_TRANSITIONS[self.state]:
            raise ValidationError(
                f"Scan {self.code}: cannot go from {self.state.value} to {new_state.value}"
            )
        self.history.append(self.state)
        self.state = new_state
        return self

    def resolve(self, result: LookupResult) -> "ScanSession":
        self.result = result
        return self.advance(_RESULT_STATES[result.type])
