#!/usr/bin/env python3
"""
Pre-populate the cursor cache for one or more customers.

Walks each customer's page chain from page 1 through the same pagination core
the Orders service uses, so every cursor lands in the configured cursor cache
(Redis by default). Prefetch is disabled here; the walk already covers every
page it would have fetched.
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import get_config  # noqa: E402
from service_orders.app.main import SERVICE_NAME, SERVICE_PORT, OrdersService  # noqa: E402


async def warm(
    service: OrdersService,
    customer_ids: List[str],
    *,
    page_size: int,
    max_pages: int,
) -> Dict[str, Any]:
    """Walk each customer's chain and return a per-customer summary."""
    summary: Dict[str, Any] = {"page_size": page_size, "customers": {}}

    for customer_id in customer_ids:
        pages = 0
        orders = 0
        complete = False
        async for _, page in service.pagination.iter_pages(customer_id, page_size, max_pages):
            pages += 1
            orders += page.count
            complete = not page.has_next
        summary["customers"][customer_id] = {"pages": pages, "orders": orders, "complete": complete}

    summary["cursor_cache"] = await service.cache_manager.get_cache_stats()
    return summary


async def run(
    *,
    customer_ids: List[str],
    page_size: int,
    max_pages: int,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    config = get_config(SERVICE_NAME, SERVICE_PORT, prefetch_pages=0, **(overrides or {}))
    service = OrdersService(config)
    await service.start()
    try:
        return await warm(service, customer_ids, page_size=page_size, max_pages=max_pages)
    finally:
        await service.stop()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Warm the cursor cache for customer order chains.")
    parser.add_argument("customers", nargs="+", help="Customer IDs to warm")
    parser.add_argument("--page-size", type=int, default=int(os.getenv("ACCESS_DEFAULT_PAGE_SIZE", 10)), help="Page size to warm")
    parser.add_argument("--max-pages", type=int, default=50, help="Stop after this many pages per customer")
    parser.add_argument("--redis-url", default=os.getenv("ACCESS_REDIS_URL", "redis://localhost:6379/0"), help="Redis connection URL")
    parser.add_argument("--cache-backend", default=os.getenv("ACCESS_CURSOR_CACHE_BACKEND", "redis"), choices=["redis", "memory"], help="Cursor cache backend")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        summary = asyncio.run(
            run(
                customer_ids=args.customers,
                page_size=args.page_size,
                max_pages=args.max_pages,
                overrides={"redis_url": args.redis_url, "cursor_cache_backend": args.cache_backend},
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cursor-warm] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
