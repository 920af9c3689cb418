from pizza_service.models.auth_session import AuthSession
from pizza_service.models.diner_order import DinerOrder
from pizza_service.models.menu_item import MenuItem
from pizza_service.models.order_item import OrderItemRow

__all__ = [
    "AuthSession",
    "MenuItem",
    "DinerOrder",
    "OrderItemRow",
]
