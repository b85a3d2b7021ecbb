"""
Fire concurrent checkouts at a running server for one sku.

Every worker fills its own cart with --qty units and checks out at the same
time; afterwards the remaining stock is printed so overdraws are visible.
"""
import argparse
import concurrent.futures
import os

import requests

BASE = os.environ.get("SWIFTSHOP_BASE", "http://127.0.0.1:8000")


def checkout_task(i, sku, qty):
    headers = {"X-User-Id": f"load-{i}"}
    try:
        requests.delete(f"{BASE}/api/cart/items/{sku}", headers=headers, timeout=10)
        requests.post(
            f"{BASE}/api/cart/items", json={"sku": sku, "qty": qty}, headers=headers, timeout=10
        )
        r = requests.post(
            f"{BASE}/api/checkout", json={"payment_method": "card"}, headers=headers, timeout=20
        )
        return (i, r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "ERR", str(e))


def run(workers, sku, qty):
    print(f"Running checkout test: workers={workers}, sku={sku}, qty={qty}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(checkout_task, i, sku, qty) for i in range(workers)]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    ok = sum(1 for r in results if r[1] == 201)
    stock = requests.get(f"{BASE}/api/products/{sku}", timeout=10).json().get("stock")
    print(f"succeeded={ok} failed={len(results) - ok} remaining_stock={stock}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent checkout tool.")
    parser.add_argument("--sku", default="TEA-100")
    parser.add_argument("--qty", type=int, default=1)
    parser.add_argument("--workers", type=int, default=8)
    args = parser.parse_args()
    run(args.workers, args.sku, args.qty)
