#!/usr/bin/env python3
"""
Example 1: Fetch the catalog

Counts and downloads every product and category of a shop through the
bounded-concurrency dispatcher, printing a progress bar while pages arrive.

Usage:
    python 01_fetch_catalog.py --domain https://shop.example.com --key ck_... --secret cs_...
"""

import argparse
import logging
import sys

from woocommerce_client import Connection, WooError
from woocommerce_client import catalog


def main():
    parser = argparse.ArgumentParser(description="Fetch all products and categories")
    parser.add_argument("--domain", required=True, help="Shop base URL")
    parser.add_argument("--key", required=True, help="Consumer key")
    parser.add_argument("--secret", required=True, help="Consumer secret")
    parser.add_argument("--workers", type=int, default=8, help="Concurrent requests")
    parser.add_argument("--retries", type=int, default=3, help="Attempts per request")
    parser.add_argument("--page-size", type=int, default=100, help="Products per page")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        with Connection().init(
            args.domain, args.key, args.secret,
            max_concurrent_requests=args.workers,
            max_retries=args.retries,
        ) as conn:
            products = catalog.get_all_products(conn, page_size=args.page_size, verbose=True)
            categories = catalog.query_categories(conn)
    except WooError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    print(f"{len(products)} products, {len(categories)} categories")
    for category in categories:
        print(f"  [{category.id}] {category.name} ({category.count or 0})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
