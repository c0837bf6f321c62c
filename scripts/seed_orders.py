#!/usr/bin/env python3
"""
Write synthetic orders for local development and load checks.

Orders go through the configured order store and each touched customer's
cursor chain is invalidated afterwards, exactly as ``POST /orders`` does.
"""

import argparse
import asyncio
import json
import os
import random
import sys
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import get_config  # noqa: E402
from service_orders.app.main import SERVICE_NAME, SERVICE_PORT, OrdersService  # noqa: E402
from service_orders.app.models import Order  # noqa: E402


def build_orders(
    customer_id: str,
    count: int,
    *,
    start: Optional[datetime] = None,
    seed: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Orders one minute apart, oldest first, with random non-zero values."""
    rng = random.Random(seed)
    start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
    orders = []
    for index in range(1, count + 1):
        order = Order(
            CustomerID=customer_id,
            OrderNumber=f"{customer_id}-{index:05d}",
            OrderValue=round(rng.uniform(1, 500), 2),
            OrderDate=(start + timedelta(minutes=index)).strftime("%Y-%m-%dT%H:%M:%SZ"),
        )
        orders.append(order.model_dump())
    return orders


async def seed(service: OrdersService, customer_ids: List[str], count: int, seed_value: Optional[int] = None) -> Dict[str, Any]:
    summary: Dict[str, Any] = {}
    for customer_id in customer_ids:
        for order in build_orders(customer_id, count, seed=seed_value):
            await service.store.put_order(order)
        invalidated = await service.invalidation.invalidate(customer_id)
        summary[customer_id] = {"written": count, "cache_invalidated": invalidated}
    return summary


async def run(
    *,
    customer_ids: List[str],
    count: int,
    seed_value: Optional[int] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    config = get_config(SERVICE_NAME, SERVICE_PORT, prefetch_pages=0, **(overrides or {}))
    service = OrdersService(config)
    await service.start()
    try:
        return await seed(service, customer_ids, count, seed_value)
    finally:
        await service.stop()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed synthetic orders into the order store.")
    parser.add_argument("customers", nargs="+", help="Customer IDs to seed")
    parser.add_argument("--count", type=int, default=25, help="Orders per customer")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for order values")
    parser.add_argument("--table", default=os.getenv("ACCESS_DYNAMODB_TABLE_NAME", "Orders"), help="DynamoDB table name")
    parser.add_argument("--endpoint-url", default=os.getenv("ACCESS_DYNAMODB_ENDPOINT_URL"), help="DynamoDB endpoint (e.g. DynamoDB Local)")
    parser.add_argument("--redis-url", default=os.getenv("ACCESS_REDIS_URL", "redis://localhost:6379/0"), help="Redis connection URL")
    parser.add_argument("--cache-backend", default=os.getenv("ACCESS_CURSOR_CACHE_BACKEND", "redis"), choices=["redis", "memory"], help="Cursor cache backend")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    if args.count < 1:
        print("[seed-orders] --count must be at least 1", file=sys.stderr)
        return 2

    try:
        summary = asyncio.run(
            run(
                customer_ids=args.customers,
                count=args.count,
                seed_value=args.seed,
                overrides={
                    "store_backend": "dynamodb",
                    "dynamodb_table_name": args.table,
                    "dynamodb_endpoint_url": args.endpoint_url,
                    "redis_url": args.redis_url,
                    "cursor_cache_backend": args.cache_backend,
                },
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[seed-orders] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
