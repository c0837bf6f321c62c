"""
Order store interface consumed by the pagination core.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

Cursor = Dict[str, Any]
Item = Dict[str, Any]


@dataclass
class QueryResult:
    """One keyset page returned by the store."""

    items: List[Item]
    next_cursor: Optional[Cursor] = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


@dataclass
class ScanResult:
    """Unpaginated scan of the whole table."""

    items: List[Item] = field(default_factory=list)
    count: int = 0
    scanned_count: int = 0


class OrderStore(Protocol):
    """Ordered, partitioned store of customer orders.

    Partitions are keyed by ``CustomerID``; ``query_page`` returns them in
    descending ``OrderDate`` order and hands back an opaque continuation
    cursor, ``None`` once the partition is exhausted.
    """

    table_name: str

    async def query_page(self, customer_id: str, limit: int, cursor: Optional[Cursor] = None) -> QueryResult:
        ...

    async def put_order(self, order: Item) -> Item:
        ...

    async def scan(self) -> ScanResult:
        ...

    async def describe(self) -> Dict[str, Any]:
        ...

    async def health_check(self) -> bool:
        ...

    async def start(self) -> None:
        ...

    async def close(self) -> None:
        ...
