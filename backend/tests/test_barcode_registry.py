import pytest

from helpers import barcodes_of, make_business, make_product
from skuhub.db import SessionLocal, init_db
from skuhub.exceptions import IntegrityError, NotFoundError, ValidationError
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology
from skuhub.services.barcode_registry import BarcodeRegistry


def setup_module(module):
    init_db(reset=True)
    module.BIZ = make_business(name="Registry", prefix="REG")


def _registry_call(method, *args, **kwargs):
    db = SessionLocal()
    try:
        return getattr(BarcodeRegistry(db), method)(*args, **kwargs)
    finally:
        db.close()


def _primaries(product_id):
    return [b for b in barcodes_of(product_id) if b.is_primary]


def test_first_barcode_is_forced_primary():
    p = make_product(BIZ.id, "REG-1")
    b = _registry_call("attach", p.id, "REG1-A", "CODE128", is_primary=False)
    assert b.is_primary is True
    assert b.source is BarcodeSource.MANUAL


def test_requested_primary_demotes_others():
    p = make_product(BIZ.id, "REG-2")
    first = _registry_call("attach", p.id, "REG2-A", "CODE128")
    second = _registry_call("attach", p.id, "REG2-B", "CODE128")
    assert second.is_primary is False

    third = _registry_call("attach", p.id, "REG2-C", BarcodeSymbology.CODE128, is_primary=True)
    primaries = _primaries(p.id)
    assert [b.id for b in primaries] == [third.id]

    listed = _registry_call("list_by_product", p.id)
    assert [b.id for b in listed] == [third.id, first.id, second.id]


def test_detach_only_barcode_is_rejected():
    p = make_product(BIZ.id, "REG-3")
    only = _registry_call("attach", p.id, "REG3-A", "CODE128")
    with pytest.raises(IntegrityError):
        _registry_call("detach", p.id, only.id)
    assert [b.id for b in barcodes_of(p.id)] == [only.id]


def test_detach_primary_promotes_earliest_remaining():
    p = make_product(BIZ.id, "REG-4")
    a = _registry_call("attach", p.id, "REG4-A", "CODE128")
    b = _registry_call("attach", p.id, "REG4-B", "CODE128")
    c = _registry_call("attach", p.id, "REG4-C", "CODE128")

    promoted = _registry_call("detach", p.id, a.id)
    assert promoted.id == b.id
    assert [x.id for x in _primaries(p.id)] == [b.id]

    # removing a non-primary promotes nothing
    assert _registry_call("detach", p.id, c.id) is None
    assert [x.id for x in _primaries(p.id)] == [b.id]


def test_set_primary_switches_and_is_idempotent():
    p = make_product(BIZ.id, "REG-5")
    a = _registry_call("attach", p.id, "REG5-A", "CODE128")
    b = _registry_call("attach", p.id, "REG5-B", "CODE128")

    assert _registry_call("set_primary", p.id, b.id).is_primary is True
    assert [x.id for x in _primaries(p.id)] == [b.id]

    again = _registry_call("set_primary", p.id, b.id)
    assert again.id == b.id
    assert [x.id for x in _primaries(p.id)] == [b.id]
    assert _registry_call("primary_for", p.id).id == b.id

    with pytest.raises(NotFoundError):
        _registry_call("set_primary", p.id, 987654)


def test_attach_validates_code_and_product():
    p = make_product(BIZ.id, "REG-6")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "12345", "UPC_A")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "   ", "CODE128")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "ABC", "NOT_A_SYMBOLOGY")
    with pytest.raises(NotFoundError):
        _registry_call("attach", 987654, "REG6-A", "CODE128")
    assert barcodes_of(p.id) == []

    b = _registry_call("attach", p.id, " 000000099875 ", "upca")
    assert b.code == "000000099875"
    assert b.symbology is BarcodeSymbology.UPC_A


def test_same_code_twice_is_an_integrity_error():
    p = make_product(BIZ.id, "REG-7")
    q = make_product(BIZ.id, "REG-8")
    _registry_call("attach", p.id, "REG7-A", "CODE128")
    with pytest.raises(IntegrityError):
        _registry_call("attach", q.id, "REG7-A", "CODE128")
    assert barcodes_of(q.id) == []


@pytest.mark.parametrize(
    "spelling,code,expected",
    [
        ("code128", "REG-T-128", BarcodeSymbology.CODE128),
        ("ean13", "4006381333931", BarcodeSymbology.EAN_13),
        ("ean8", "96385074", BarcodeSymbology.EAN_8),
        ("code39", "REG-T-39", BarcodeSymbology.CODE39),
        ("upca", "036000291452", BarcodeSymbology.UPC_A),
        ("itf14", "10012345678902", BarcodeSymbology.ITF),
        ("msi", "80523", BarcodeSymbology.MSI),
        ("pharmacode", "12345", BarcodeSymbology.PHARMACODE),
        ("codabar", "A40156B", BarcodeSymbology.CODABAR),
    ],
)
def test_every_template_spelling_attaches(spelling, code, expected):
    p = make_product(BIZ.id, f"REG-T-{spelling}")
    b = _registry_call("attach", p.id, code, spelling)
    assert b.symbology is expected
    assert b.code == code


def test_msi_and_pharmacode_rules():
    p = make_product(BIZ.id, "REG-9")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "12AB", "msi")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "2", "pharmacode")
    with pytest.raises(ValidationError):
        _registry_call("attach", p.id, "131071", "pharmacode")
    assert barcodes_of(p.id) == []


def test_listing_missing_product_is_not_found():
    with pytest.raises(NotFoundError):
        _registry_call("list_by_product", 987654)
    p = make_product(BIZ.id, "REG-10")
    assert _registry_call("list_by_product", p.id) == []
