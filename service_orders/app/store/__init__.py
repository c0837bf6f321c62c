"""
Order store adapters.

``DynamoDBOrderStore`` talks to the real table; ``InMemoryOrderStore`` keeps
the same contract for local runs and tests.
"""

from .base import Cursor, Item, OrderStore, QueryResult, ScanResult
from .dynamodb import DynamoDBOrderStore
from .memory import InMemoryOrderStore

__all__ = [
    "Cursor",
    "Item",
    "OrderStore",
    "QueryResult",
    "ScanResult",
    "DynamoDBOrderStore",
    "InMemoryOrderStore",
]
