"""
Typed records passed between the services and their callers.

Constructors validate their own invariants and raise ValidationError, so a
record that exists is a record that can be persisted.
"""
from dataclasses import dataclass, field
from datetime import datetime
from numbers import Real
from typing import List, Optional

from pizza_service.errors import ValidationError


def _check_price(price, where: str) -> None:
    if isinstance(price, bool) or not isinstance(price, Real):
        raise ValidationError(f"{where}: price must be numeric, got {price!r}")
    if not price > 0:
        raise ValidationError(f"{where}: price must be > 0, got {price!r}")


def _check_description(description, where: str) -> None:
    if not isinstance(description, str) or not description.strip():
        raise ValidationError(f"{where}: description is required")


@dataclass(frozen=True)
class Diner:
    id: int
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class SessionRecord:
    user_id: int
    signature: str

    def __post_init__(self):
        if not self.signature:
            raise ValidationError("Session signature must not be empty")


@dataclass(frozen=True)
class CatalogEntry:
    id: int
    natural_key: str


@dataclass(frozen=True)
class OrderItemRequest:
    """
    One requested line item as submitted by the client.

    `menu_id` is whatever the client sent; it is never trusted and is
    replaced by the catalog-resolved id.
    """

    description: str
    price: float
    menu_id: Optional[int] = None


@dataclass(frozen=True)
class OrderRequest:
    franchise_id: int
    store_id: int
    items: List[OrderItemRequest] = field(default_factory=list)

    def validate(self) -> None:
        """Check request shape; raises ValidationError before any write."""
        if not isinstance(self.items, (list, tuple)) or len(self.items) == 0:
            raise ValidationError("Order must contain at least one item")
        for index, item in enumerate(self.items):
            where = f"item {index}"
            _check_description(item.description, where)
            _check_price(item.price, where)


@dataclass(frozen=True)
class OrderItem:
    menu_id: int
    description: str
    price: float

    def __post_init__(self):
        _check_description(self.description, "order item")
        _check_price(self.price, "order item")


@dataclass(frozen=True)
class Order:
    id: int
    franchise_id: int
    store_id: int
    date: datetime
    items: List[OrderItem] = field(default_factory=list)


@dataclass(frozen=True)
class DinerOrders:
    diner_id: int
    orders: List[Order]
    page: int
