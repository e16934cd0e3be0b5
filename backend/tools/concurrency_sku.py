import os
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import requests
import concurrent.futures
import argparse
from collections import Counter

BASE = os.environ.get("SKUHUB_BASE", "http://127.0.0.1:8000")

def generate_task(i, business_id, category, department):
    payload = {"category_name": category, "department_name": department}
    try:
        r = requests.post(f"{BASE}/api/businesses/{business_id}/skus", json=payload, timeout=30)
        return (i, "generate", r.status_code, r.json() if r.ok else r.text)
    except Exception as e:
        return (i, "generate", "ERR", str(e))

def attach_task(i, product_id, code):
    try:
        r = requests.post(f"{BASE}/api/products/{product_id}/barcodes", json={"code": code}, timeout=30)
        return (i, "attach", r.status_code, r.json() if r.status_code < 500 else r.text)
    except Exception as e:
        return (i, "attach", "ERR", str(e))

def run_generate_concurrent(workers, calls, business_id, category, department):
    print(f"Running SKU test: workers={workers}, calls={calls}, business={business_id}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(generate_task, i, business_id, category, department) for i in range(calls)]
        results = [f.result() for f in futures]
    failures = [r for r in results if r[2] != 200]
    skus = [r[3]["sku"] for r in results if r[2] == 200]
    dupes = [s for s, n in Counter(skus).items() if n > 1]
    print("Failures:", failures)
    print(f"Generated {len(skus)} SKUs, {len(set(skus))} unique")
    if dupes:
        print("DUPLICATES:", dupes)
        sys.exit(1)

def run_attach_concurrent(workers, product_ids, code):
    print(f"Running conflict test: code={code} products={product_ids}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(attach_task, i, pid, code) for i, pid in enumerate(product_ids)]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    winners = [r for r in results if r[2] == 201]
    print("Attached:", len(winners), "Conflicts:", sum(1 for r in results if r[2] == 409))
    if len(winners) != 1:
        sys.exit(1)

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency test tool (SKU generation or barcode conflicts).")
    sub = parser.add_subparsers(dest="mode", required=True)

    g = sub.add_parser("skus")
    g.add_argument("--business", type=int, required=True)
    g.add_argument("--category", default=None)
    g.add_argument("--department", default=None)
    g.add_argument("--workers", type=int, default=8)
    g.add_argument("--calls", type=int, default=50)

    a = sub.add_parser("attach")
    a.add_argument("--products", type=int, nargs="+", required=True)
    a.add_argument("--code", default="RACE-0001")
    a.add_argument("--workers", type=int, default=8)

    args = parser.parse_args()

    if args.mode == "skus":
        run_generate_concurrent(args.workers, args.calls, args.business, args.category, args.department)
    elif args.mode == "attach":
        run_attach_concurrent(args.workers, args.products, args.code)
