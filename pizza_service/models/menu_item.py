from typing import Optional

from sqlmodel import Field, SQLModel


class MenuItem(SQLModel, table=True):
    __tablename__ = "menu"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str = Field(index=True)  # natural key used by order items
    image: Optional[str] = Field(default=None)
    price: float
