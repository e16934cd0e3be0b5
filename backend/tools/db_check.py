import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "skuhub.db"
PRODUCT_ID = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== SKU Sequences ===")
cur.execute(
    "SELECT id, business_id, prefix, current_sequence, updated_at FROM sku_sequences ORDER BY business_id, prefix"
)
for r in cur.fetchall():
    print({"id": r[0], "business_id": r[1], "prefix": r[2], "current_sequence": r[3], "updated_at": r[4]})

print("\n=== Barcodes ===")
if PRODUCT_ID:
    cur.execute(
        "SELECT id, product_id, code, symbology, is_primary, source, created_at FROM product_barcodes WHERE product_id=? ORDER BY is_primary DESC, created_at",
        (PRODUCT_ID,),
    )
else:
    cur.execute(
        "SELECT id, product_id, code, symbology, is_primary, source, created_at FROM product_barcodes ORDER BY created_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    print(r)

# invariant: at most one primary per product
cur.execute(
    "SELECT product_id, COUNT(*) FROM product_barcodes WHERE is_primary = 1 GROUP BY product_id HAVING COUNT(*) > 1"
)
bad = cur.fetchall()
if bad:
    print("\n!!! Products with more than one primary barcode:", bad)

print("\n=== Recent Price Changes ===")
if PRODUCT_ID:
    cur.execute(
        "SELECT id, product_id, variant_id, old_price_cents, new_price_cents, reason, changed_by, changed_at FROM product_price_changes WHERE product_id=? ORDER BY changed_at DESC LIMIT 50",
        (PRODUCT_ID,),
    )
else:
    cur.execute(
        "SELECT id, product_id, variant_id, old_price_cents, new_price_cents, reason, changed_by, changed_at FROM product_price_changes ORDER BY changed_at DESC LIMIT 20"
    )
for r in cur.fetchall():
    print(r)

conn.close()
