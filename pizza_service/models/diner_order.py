from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from pizza_service.models.order_item import OrderItemRow


class DinerOrder(SQLModel, table=True):
    __tablename__ = "diner_order"

    id: Optional[int] = Field(default=None, primary_key=True)
    diner_id: int = Field(index=True)
    franchise_id: int
    store_id: int
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships (items in insertion order)
    items: List["OrderItemRow"] = Relationship(sa_relationship_kwargs={"order_by": "OrderItemRow.id"})
