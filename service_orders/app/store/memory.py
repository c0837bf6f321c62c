"""
Process-local order store with DynamoDB-shaped continuation cursors.

Used for local development (``ACCESS_STORE_BACKEND=memory``), the seed
script and the test suite.
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

from shared.errors import StoreError
from shared.logging import get_logger

from .base import Cursor, Item, QueryResult, ScanResult


def _sort_key(item: Item) -> Tuple[str, str]:
    return (str(item["OrderDate"]), str(item["OrderNumber"]))


class InMemoryOrderStore:
    """Orders held per customer, served newest ``OrderDate`` first."""

    def __init__(self, table_name: str = "Orders", orders: Optional[List[Item]] = None) -> None:
        self.table_name = table_name
        self.logger = get_logger("orders.store.memory")
        self._partitions: Dict[str, Dict[str, Item]] = {}
        self.query_count = 0
        for order in orders or []:
            self._insert(order)

    def _insert(self, order: Item) -> None:
        partition = self._partitions.setdefault(order["CustomerID"], {})
        partition[str(order["OrderNumber"])] = dict(order)

    def _ordered(self, customer_id: str) -> List[Item]:
        partition = self._partitions.get(customer_id, {})
        return sorted(partition.values(), key=_sort_key, reverse=True)

    async def query_page(self, customer_id: str, limit: int, cursor: Optional[Cursor] = None) -> QueryResult:
        if limit < 1:
            raise StoreError("query", "Limit must be at least 1", {"limit": limit})

        await asyncio.sleep(0)
        self.query_count += 1

        ordered = self._ordered(customer_id)
        if cursor is not None:
            if cursor.get("CustomerID") != customer_id:
                raise StoreError("query", "Cursor does not belong to partition", {"customer_id": customer_id})
            boundary = (str(cursor["OrderDate"]), str(cursor["OrderNumber"]))
            ordered = [item for item in ordered if _sort_key(item) < boundary]

        page = [dict(item) for item in ordered[:limit]]
        next_cursor = None
        if len(ordered) > limit:
            last = page[-1]
            next_cursor = {
                "CustomerID": customer_id,
                "OrderDate": last["OrderDate"],
                "OrderNumber": last["OrderNumber"],
            }
        return QueryResult(items=page, next_cursor=next_cursor)

    async def put_order(self, order: Item) -> Item:
        await asyncio.sleep(0)
        self._insert(order)
        self.logger.debug("Order stored", customer_id=order["CustomerID"], order_number=order["OrderNumber"])
        return order

    async def scan(self) -> ScanResult:
        items = [dict(item) for partition in self._partitions.values() for item in partition.values()]
        return ScanResult(items=items, count=len(items), scanned_count=len(items))

    async def describe(self) -> Dict[str, Any]:
        item_count = sum(len(partition) for partition in self._partitions.values())
        return {
            "TableName": self.table_name,
            "TableStatus": "ACTIVE",
            "ItemCount": item_count,
            "KeySchema": [
                {"AttributeName": "CustomerID", "KeyType": "HASH"},
                {"AttributeName": "OrderNumber", "KeyType": "RANGE"},
            ],
            "GlobalSecondaryIndexes": [
                {
                    "IndexName": "CustomerID-OrderDate-index",
                    "KeySchema": [
                        {"AttributeName": "CustomerID", "KeyType": "HASH"},
                        {"AttributeName": "OrderDate", "KeyType": "RANGE"},
                    ],
                }
            ],
        }

    async def health_check(self) -> bool:
        return True

    async def start(self) -> None:
        return None

    async def close(self) -> None:
        return None
