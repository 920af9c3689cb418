from typing import Optional

from sqlmodel import Field, SQLModel


class OrderItemRow(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="diner_order.id", index=True)
    menu_id: int = Field(foreign_key="menu.id")  # always the catalog-resolved id
    description: str
    price: float
