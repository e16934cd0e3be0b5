from helpers import barcodes_of, fetch, make_business, make_product
from skuhub.db import SessionLocal, init_db
from skuhub.exceptions import IntegrityError
from skuhub.models.barcode import BarcodeSource
from skuhub.models.product import Product
from skuhub.services.barcode_conflicts import BarcodeAdded, BarcodeConflict
from skuhub.services.label_sync import LabelPriceSync


def setup_module(module):
    init_db(reset=True)
    module.BIZ = make_business(name="Labels", prefix="LBL")


def _submit(**kwargs):
    db = SessionLocal()
    try:
        return LabelPriceSync(db).submit(**kwargs)
    finally:
        db.close()


def test_confirmed_override_updates_price_and_attaches_code():
    p = make_product(BIZ.id, "LBL-1", price_cents=1000)
    res = _submit(
        product_id=p.id,
        code="LBL1-PRINT",
        symbology="code128",
        original_price_cents=1000,
        printed_price_cents=1100,
        confirm_price_update=True,
        barcode_job_id="job-1",
        template_name="Shelf 40x30",
        changed_by="user-7",
    )

    assert res.price_overridden is True
    assert res.price_update.audit_row.reason == "BARCODE_LABEL_PRINT"
    assert fetch(Product, p.id).sell_price_cents == 1100
    assert isinstance(res.barcode, BarcodeAdded)

    (b,) = barcodes_of(p.id)
    assert b.code == "LBL1-PRINT"
    assert b.source is BarcodeSource.LABEL_PRINT
    assert b.label == "Generated from Shelf 40x30"
    assert b.is_primary is True


def test_unconfirmed_override_leaves_price_alone():
    p = make_product(BIZ.id, "LBL-2", price_cents=500)
    res = _submit(
        product_id=p.id,
        code=None,
        symbology="CODE128",
        original_price_cents=500,
        printed_price_cents=450,
    )
    assert res.price_overridden is True
    assert res.price_update is None
    assert fetch(Product, p.id).sell_price_cents == 500
    assert barcodes_of(p.id) == []


def test_attach_conflict_is_reported_and_price_update_stands():
    holder = make_product(BIZ.id, "LBL-3")
    p = make_product(BIZ.id, "LBL-4", price_cents=700)
    _submit(
        product_id=holder.id,
        code="LBL-SHARED",
        symbology="CODE128",
        original_price_cents=None,
        printed_price_cents=None,
    )

    res = _submit(
        product_id=p.id,
        code="LBL-SHARED",
        symbology="CODE128",
        original_price_cents=700,
        printed_price_cents=750,
        confirm_price_update=True,
        reason="MANUAL_CORRECTION",
    )
    assert isinstance(res.barcode, BarcodeConflict)
    assert res.barcode.holder_product_id == holder.id
    assert fetch(Product, p.id).sell_price_cents == 750
    assert res.price_update.audit_row.reason == "MANUAL_CORRECTION"
    assert barcodes_of(p.id) == []


def test_reprinting_same_code_does_not_duplicate():
    p = make_product(BIZ.id, "LBL-5")
    for _ in range(2):
        res = _submit(
            product_id=p.id,
            code="LBL5-PRINT",
            symbology="CODE128",
            original_price_cents=1000,
            printed_price_cents=1000,
        )
        assert res.price_overridden is False
    assert res.barcode.created is False
    assert len(barcodes_of(p.id)) == 1


def test_integrity_failure_is_reported_not_raised():
    p = make_product(BIZ.id, "LBL-6", price_cents=200)

    def refuse(*args, **kwargs):
        raise IntegrityError("Cannot remove the only barcode of product 1")

    db = SessionLocal()
    try:
        svc = LabelPriceSync(db)
        svc.conflicts.add_with_conflict_check = refuse
        res = svc.submit(
            product_id=p.id,
            code="LBL6-PRINT",
            symbology="CODE128",
            original_price_cents=200,
            printed_price_cents=250,
            confirm_price_update=True,
        )
    finally:
        db.close()
    assert res.barcode is None
    assert "only barcode" in res.barcode_error
    assert fetch(Product, p.id).sell_price_cents == 250


def test_rejected_printed_code_is_reported_not_raised():
    p = make_product(BIZ.id, "LBL-8", price_cents=1000)
    res = _submit(
        product_id=p.id,
        code="12345",
        symbology="upca",
        original_price_cents=1000,
        printed_price_cents=1100,
        confirm_price_update=True,
    )
    assert res.barcode is None
    assert "UPC-A" in res.barcode_error
    assert res.price_update.audit_row.new_price_cents == 1100
    assert fetch(Product, p.id).sell_price_cents == 1100
    assert barcodes_of(p.id) == []

    res = _submit(
        product_id=p.id,
        code="LBL8-X",
        symbology="not-a-symbology",
        original_price_cents=1100,
        printed_price_cents=1100,
    )
    assert res.barcode is None
    assert "symbology" in res.barcode_error


def test_pharmacode_label_attaches():
    p = make_product(BIZ.id, "LBL-9")
    res = _submit(
        product_id=p.id,
        code="12345",
        symbology="pharmacode",
        original_price_cents=None,
        printed_price_cents=None,
    )
    assert res.barcode_error is None
    assert res.barcode.barcode.symbology.value == "PHARMACODE"
