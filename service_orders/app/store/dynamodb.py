"""
Async DynamoDB adapter for the customer orders table.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Dict, Optional

import aioboto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from shared.errors import StoreError
from shared.logging import get_logger

from .base import Cursor, Item, QueryResult, ScanResult


def _plain(value: Any) -> Any:
    """Turn the resource layer's Decimals back into JSON-friendly numbers."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: _plain(inner) for key, inner in value.items()}
    if isinstance(value, list):
        return [_plain(inner) for inner in value]
    return value


class DynamoDBOrderStore:
    """Orders table client querying the CustomerID/OrderDate index."""

    def __init__(
        self,
        table_name: str,
        *,
        index_name: str = "CustomerID-OrderDate-index",
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.table_name = table_name
        self.index_name = index_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.logger = get_logger("orders.store.dynamodb")

        self._session = aioboto3.Session()
        self._resource_context = None
        self._resource = None
        self._table = None

    async def start(self) -> None:
        """Open the DynamoDB resource and bind the table."""
        if self._table is not None:
            return

        self._resource_context = self._session.resource(
            "dynamodb",
            region_name=self.region_name,
            endpoint_url=self.endpoint_url,
        )
        self._resource = await self._resource_context.__aenter__()
        self._table = await self._resource.Table(self.table_name)
        self.logger.info(
            "DynamoDB order store started",
            table=self.table_name,
            index=self.index_name,
            region=self.region_name,
        )

    async def close(self) -> None:
        """Release the underlying client."""
        if self._resource_context is None:
            return
        await self._resource_context.__aexit__(None, None, None)
        self._resource_context = None
        self._resource = None
        self._table = None
        self.logger.info("DynamoDB order store stopped")

    async def _get_table(self):
        if self._table is None:
            await self.start()
        return self._table

    async def query_page(self, customer_id: str, limit: int, cursor: Optional[Cursor] = None) -> QueryResult:
        """Fetch one page of a customer's orders, newest first."""
        params: Dict[str, Any] = {
            "IndexName": self.index_name,
            "KeyConditionExpression": Key("CustomerID").eq(customer_id),
            "Limit": limit,
            "ScanIndexForward": False,
        }
        if cursor is not None:
            params["ExclusiveStartKey"] = cursor

        try:
            table = await self._get_table()
            result = await table.query(**params)
        except (BotoCoreError, ClientError) as exc:
            self.logger.error("Order query failed", customer_id=customer_id, limit=limit, error=str(exc))
            raise StoreError("query", str(exc), {"customer_id": customer_id, "limit": limit}) from exc

        items = [_plain(item) for item in result.get("Items", [])]
        self.logger.debug(
            "Order query completed",
            customer_id=customer_id,
            limit=limit,
            items=len(items),
            has_more="LastEvaluatedKey" in result,
        )
        return QueryResult(items=items, next_cursor=result.get("LastEvaluatedKey"))

    async def put_order(self, order: Item) -> Item:
        """Persist a single order."""
        # The resource layer rejects floats; round-trip through str keeps the literal value.
        item = json.loads(json.dumps(order), parse_float=Decimal)
        try:
            table = await self._get_table()
            await table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            self.logger.error("Order write failed", customer_id=order.get("CustomerID"), error=str(exc))
            raise StoreError("put", str(exc), {"customer_id": order.get("CustomerID")}) from exc
        return order

    async def scan(self) -> ScanResult:
        """Single unpaginated table scan."""
        try:
            table = await self._get_table()
            result = await table.scan()
        except (BotoCoreError, ClientError) as exc:
            self.logger.error("Order scan failed", error=str(exc))
            raise StoreError("scan", str(exc)) from exc

        return ScanResult(
            items=[_plain(item) for item in result.get("Items", [])],
            count=result.get("Count", 0),
            scanned_count=result.get("ScannedCount", 0),
        )

    async def describe(self) -> Dict[str, Any]:
        """Return the DynamoDB table description."""
        try:
            await self._get_table()
            result = await self._resource.meta.client.describe_table(TableName=self.table_name)
        except (BotoCoreError, ClientError) as exc:
            self.logger.error("Describe table failed", error=str(exc))
            raise StoreError("describe", str(exc)) from exc
        return result["Table"]

    async def health_check(self) -> bool:
        try:
            await self.describe()
            return True
        except StoreError:
            return False
