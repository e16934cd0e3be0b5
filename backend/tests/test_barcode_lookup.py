import pytest

from helpers import make_business, make_product, make_template
from skuhub.db import SessionLocal, init_db
from skuhub.exceptions import ValidationError
from skuhub.services.barcode_lookup import (
    BarcodeResolver,
    NotFound,
    ProductMatch,
    ScanSession,
    ScanState,
    TemplateMatch,
    parse_price_cents,
)
from skuhub.services.barcode_registry import BarcodeRegistry


def setup_module(module):
    init_db(reset=True)
    module.BIZ = make_business(name="Lookup Co", prefix="CNI", digits=4)
    module.OTHER = make_business(name="Elsewhere", prefix="ELS", digits=4)


def _lookup(code, business_id, scope="current", accessible=None):
    db = SessionLocal()
    try:
        return BarcodeResolver(db).lookup(code, business_id, scope, accessible)
    finally:
        db.close()


def _registry(method, *args):
    db = SessionLocal()
    try:
        return getattr(BarcodeRegistry(db), method)(*args)
    finally:
        db.close()


def test_product_then_template_then_miss():
    a = make_product(BIZ.id, "CNI-9987", name="Product A")
    code = "000000099875"
    held = _registry("attach", a.id, code, "UPC_A")
    spare = _registry("attach", a.id, "CNI-9987-ALT", "CODE128")
    make_template(BIZ.id, code, name="Cola label", custom_data={"name": "Cola 500ml", "price": "1.25"})

    res = _lookup(code, BIZ.id)
    assert isinstance(res, ProductMatch)
    assert res.type == "product"
    assert res.product.id == a.id
    assert res.barcode.id == held.id

    _registry("detach", a.id, held.id)
    res = _lookup(code, BIZ.id)
    assert isinstance(res, TemplateMatch)
    assert res.type == "template"
    assert res.suggested_product["name"] == "Cola 500ml"
    assert res.suggested_product["price_cents"] == 125
    assert res.suggested_product["barcode"] == code

    res = _lookup("NOPE-123", BIZ.id)
    assert isinstance(res, NotFound)
    assert res.type == "not_found"
    assert res.code == "NOPE-123"
    assert spare.id != held.id


def test_template_suggestion_includes_preview_sku():
    make_template(
        BIZ.id,
        "TPL-SUGGEST",
        name="Jeans label",
        custom_data={"price": 20, "size": "32", "category": "Denim", "department": "Menswear"},
    )
    res = _lookup("TPL-SUGGEST", BIZ.id)
    assert isinstance(res, TemplateMatch)
    s = res.suggested_product
    assert s["name"] == "Jeans label"
    assert s["price_cents"] == 2000
    assert s["size"] == "32"
    assert s["category"] == "Denim"
    assert s["department"] == "Menswear"
    # business format is {BUSINESS}-{SEQ} and nothing has been generated yet
    assert s["suggested_sku"] == "CNI-0001"
    assert s["template_id"] == res.template.id


def test_scope_current_vs_global():
    p = make_product(OTHER.id, "ELS-1", name="Remote")
    _registry("attach", p.id, "REMOTE-1", "CODE128")

    assert isinstance(_lookup("REMOTE-1", BIZ.id), NotFound)
    res = _lookup("REMOTE-1", BIZ.id, scope="global")
    assert isinstance(res, ProductMatch)
    assert res.product.id == p.id
    assert isinstance(_lookup("REMOTE-1", BIZ.id, "global", accessible=[BIZ.id]), NotFound)
    assert isinstance(_lookup("REMOTE-1", BIZ.id, "global", accessible=[BIZ.id, OTHER.id]), ProductMatch)


def test_bad_input():
    with pytest.raises(ValidationError):
        _lookup("X", BIZ.id, scope="everywhere")
    with pytest.raises(ValidationError):
        _lookup("  ", BIZ.id)


def test_parse_price_cents():
    assert parse_price_cents("$3") == 300
    assert parse_price_cents("1,200.50") == 120050
    assert parse_price_cents("abc") is None
    assert parse_price_cents(None) is None
    assert parse_price_cents(-1) is None


def test_scan_session_state_machine():
    scan = ScanSession(code="T-1")
    scan.resolve(TemplateMatch(template=None, suggested_product={}))
    assert scan.state is ScanState.TEMPLATE_FOUND
    scan.advance(ScanState.CREATION_PENDING).advance(ScanState.CREATED)
    assert scan.terminal
    assert scan.history == [ScanState.SCANNED, ScanState.TEMPLATE_FOUND, ScanState.CREATION_PENDING]

    found = ScanSession(code="P-1").resolve(ProductMatch(product=None, barcode=None))
    assert found.terminal
    with pytest.raises(ValidationError):
        found.advance(ScanState.CREATION_PENDING)

    miss = ScanSession(code="M-1").resolve(NotFound(code="M-1"))
    miss.advance(ScanState.MANUAL_ENTRY)
    assert miss.terminal
    with pytest.raises(ValidationError):
        ScanSession(code="X").advance(ScanState.CREATED)
