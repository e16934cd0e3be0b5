#!/usr/bin/env python3
"""
Seed a demo database: a "Hexi Traders" business (prefix HXI, 5 digits), a
product CNI-9987 holding barcode 000000099875, and a label template carrying
the same value so lookups can be tried against both tiers.

Usage:
    python scripts/seed_demo.py [--reset]
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from skuhub.db import SessionLocal, init_db
from skuhub.models.business import Business
from skuhub.models.template import BarcodeTemplate
from skuhub.repositories.product_repo import ProductRepository
from skuhub.services.barcode_conflicts import BarcodeConflict, BarcodeConflictResolver
from skuhub.services.sku_service import SkuSequenceGenerator

DEMO_CODE = "000000099875"

DEMO_TEMPLATES = [
    {"name": "Shelf label", "barcode_value": DEMO_CODE,
     "custom_data": {"name": "Chai 250g", "price": "4.50", "category": "Tea"}},
    {"name": "Bin tag", "barcode_value": "HXI-BIN-0001",
     "custom_data": {"productName": "Loose Rice", "price": "2.10", "department": "Grocery"}},
]


def seed(reset: bool = False):
    init_db(reset=reset)
    db = SessionLocal()
    try:
        with db.begin():
            business = db.query(Business).filter(Business.sku_prefix == "HXI").first()
            if business is None:
                business = Business(name="Hexi Traders", sku_prefix="HXI",
                                    sku_format="{BUSINESS}-{SEQ}", sku_digits=5)
                db.add(business)
                db.flush()

            products = ProductRepository(db)
            product = products.get_by_sku(business.id, "CNI-9987")
            if product is None:
                product = products.create(business.id, "CNI-9987", "Chai 250g", 450)

            for t in DEMO_TEMPLATES:
                exists = (
                    db.query(BarcodeTemplate)
                    .filter(BarcodeTemplate.business_id == business.id,
                            BarcodeTemplate.barcode_value == t["barcode_value"])
                    .first()
                )
                if not exists:
                    db.add(BarcodeTemplate(business_id=business.id, symbology="code128", **t))

        res = BarcodeConflictResolver(db).add_with_conflict_check(
            product.id, DEMO_CODE, "UPC_A", is_primary=True
        )
        if isinstance(res, BarcodeConflict):
            print("Barcode", DEMO_CODE, "already held by product", res.holder_product_id)

        preview = SkuSequenceGenerator(db).preview(business.id)
        print(f"Seeded business={business.id} product={product.id} next SKU={preview}")
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()
    seed(reset=args.reset)
