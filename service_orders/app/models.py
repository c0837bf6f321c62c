"""
Request and response models for the Orders service.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Order(BaseModel):
    """A customer order as written to and read from the store."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, str_strip_whitespace=True)

    CustomerID: str = Field(..., min_length=1, description="Partition key")
    OrderNumber: str = Field(..., min_length=1, description="Unique order identifier")
    OrderValue: float = Field(..., strict=True, description="Order amount")
    OrderDate: str = Field(..., min_length=1, description="Sortable order timestamp (ISO-8601)")

    @field_validator("OrderValue")
    @classmethod
    def _non_zero_value(cls, value: float) -> float:
        if value == 0:
            raise ValueError("OrderValue must be non-zero")
        return value


class OrderCreatedResponse(BaseModel):
    message: str = "Order created successfully"
    order: Order
    cacheInvalidated: bool


class OrderPageResponse(BaseModel):
    """One page of a customer's orders, newest first."""

    orders: List[Dict[str, Any]]
    customerId: str
    currentPage: int
    itemsPerPage: int
    hasNextPage: bool
    totalItems: int


class ScanResponse(BaseModel):
    items: List[Dict[str, Any]]
    count: int
    scannedCount: int
    tableName: str
