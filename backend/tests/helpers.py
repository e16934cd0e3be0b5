from skuhub.db import SessionLocal
from skuhub.models.barcode import BarcodeSource, BarcodeSymbology, ProductBarcode
from skuhub.models.business import Business
from skuhub.models.product import Product, ProductVariant
from skuhub.models.template import BarcodeTemplate


def seed(*objs):
    """Persist objects in a short-lived session and return them (ids populated)."""
    db = SessionLocal()
    try:
        for o in objs:
            db.add(o)
        db.commit()
        return objs[0] if len(objs) == 1 else objs
    finally:
        db.close()


def make_business(name="Hexi Traders", prefix="HXI", fmt="{BUSINESS}-{SEQ}", digits=5):
    return seed(Business(name=name, sku_prefix=prefix, sku_format=fmt, sku_digits=digits))


def make_product(business_id, sku, name="Item", price_cents=1000):
    return seed(
        Product(business_id=business_id, sku=sku, name=name, sell_price_cents=price_cents)
    )


def make_variant(product_id, name="Large", price_cents=1500):
    return seed(ProductVariant(product_id=product_id, name=name, price_cents=price_cents))


def make_template(business_id, barcode_value, name="Shelf label", custom_data=None):
    return seed(
        BarcodeTemplate(
            business_id=business_id,
            name=name,
            barcode_value=barcode_value,
            symbology="code128",
            custom_data=custom_data,
        )
    )


def fetch(model, id_):
    db = SessionLocal()
    try:
        return db.get(model, id_)
    finally:
        db.close()


def barcodes_of(product_id):
    db = SessionLocal()
    try:
        return (
            db.query(ProductBarcode)
            .filter(ProductBarcode.product_id == product_id)
            .order_by(ProductBarcode.id)
            .all()
        )
    finally:
        db.close()
