import concurrent.futures

import pytest

from helpers import make_business
from skuhub.db import SessionLocal, init_db
from skuhub.exceptions import NotFoundError, ValidationError
from skuhub.models.sku_sequence import SkuSequence
from skuhub.services.sku_service import SkuFormat, SkuSequenceGenerator, abbreviate


def setup_module(module):
    init_db(reset=True)


def _generate(business_id, category=None, department=None):
    db = SessionLocal()
    try:
        return SkuSequenceGenerator(db).generate(business_id, category, department)
    finally:
        db.close()


def _preview(business_id, category=None, department=None):
    db = SessionLocal()
    try:
        return SkuSequenceGenerator(db).preview(business_id, category, department)
    finally:
        db.close()


def _stored_sequence(business_id, prefix):
    db = SessionLocal()
    try:
        row = (
            db.query(SkuSequence)
            .filter(SkuSequence.business_id == business_id, SkuSequence.prefix == prefix)
            .first()
        )
        return row.current_sequence if row else None
    finally:
        db.close()


def test_business_format_sequence_and_preview():
    biz = make_business(name="Hexi", prefix="HXI", digits=5)

    assert _generate(biz.id) == "HXI-00001"
    assert _generate(biz.id) == "HXI-00002"

    assert _preview(biz.id) == "HXI-00003"
    assert _preview(biz.id) == "HXI-00003"
    assert _stored_sequence(biz.id, "HXI") == 2


def test_preview_before_first_generate_creates_nothing():
    biz = make_business(name="Fresh", prefix="FRS", digits=3)
    assert _preview(biz.id) == "FRS-001"
    assert _stored_sequence(biz.id, "FRS") is None
    assert _generate(biz.id) == "FRS-001"


def test_category_and_department_formats():
    cat = make_business(name="Cat Store", prefix="CAT", fmt="{CATEGORY}-{SEQ}", digits=4)
    dep = make_business(name="Dep Store", prefix="DEP", fmt="{DEPARTMENT}-{SEQ}", digits=4)
    both = make_business(name="Both", prefix="BTH", fmt="{BUSINESS}-{CATEGORY}-{SEQ}", digits=3)

    assert _generate(cat.id, category="Hot Drinks") == "HOT-0001"
    assert _generate(cat.id, category="hot drinks") == "HOT-0002"
    # missing category falls back to the business prefix
    assert _generate(cat.id) == "CAT-0001"

    assert _generate(dep.id, department="Garden & Tools") == "GAR-0001"
    assert _generate(dep.id, category="ignored") == "DEP-0001"

    assert _generate(both.id, category="Paint") == "BTH-PAI-001"
    assert _generate(both.id) == "BTH-001"


def test_prefixes_have_independent_sequences():
    biz = make_business(name="Split", prefix="SPL", fmt="{CATEGORY}-{SEQ}", digits=2)
    assert _generate(biz.id, category="Milk") == "MIL-01"
    assert _generate(biz.id, category="Bread") == "BRE-01"
    assert _generate(biz.id, category="Milk") == "MIL-02"


def test_missing_prefix_uses_business_name():
    biz = make_business(name="Quick Mart", prefix=None, digits=4)
    assert _generate(biz.id) == "QUI-0001"


def test_unknown_format_is_rejected():
    biz = make_business(name="Odd", prefix="ODD", fmt="{SEQ}-{BUSINESS}")
    with pytest.raises(ValidationError):
        _generate(biz.id)
    with pytest.raises(ValidationError):
        _preview(biz.id)
    assert _stored_sequence(biz.id, "ODD") is None


def test_bad_digits_and_unknown_business():
    biz = make_business(name="Wide", prefix="WID", digits=0)
    with pytest.raises(ValidationError):
        _generate(biz.id)
    with pytest.raises(NotFoundError):
        _generate(999999)


def test_format_parse_and_abbreviate():
    assert SkuFormat.parse("{BUSINESS}-{CATEGORY}-{SEQ}") is SkuFormat.BUSINESS_CATEGORY
    with pytest.raises(ValidationError):
        SkuFormat.parse(None)
    assert abbreviate("a-1 b") == "A1B"
    assert abbreviate("  ") == ""


def test_describe_pattern():
    biz = make_business(name="Pattern", prefix="PAT", digits=4)
    db = SessionLocal()
    try:
        info = SkuSequenceGenerator(db).describe_pattern(biz.id)
    finally:
        db.close()
    assert info == {
        "format": "{BUSINESS}-{SEQ}",
        "prefix": "PAT",
        "digits": 4,
        "sample": "PAT-0001",
        "next": "PAT-0001",
    }


def test_concurrent_generate_yields_distinct_sequences():
    biz = make_business(name="Busy", prefix="BSY", digits=5)
    workers = 8
    per_worker = 5

    def task(_):
        return [_generate(biz.id) for _ in range(per_worker)]

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        results = [sku for batch in ex.map(task, range(workers)) for sku in batch]

    total = workers * per_worker
    assert len(results) == total
    assert len(set(results)) == total
    assert sorted(results) == [f"BSY-{n:05d}" for n in range(1, total + 1)]
    assert _stored_sequence(biz.id, "BSY") == total
