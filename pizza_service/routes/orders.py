"""
Order API Routes
Menu listing, order history and order creation for the authenticated diner.
JSON bodies use camelCase keys (franchiseId, menuId, ...).
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import Session

from pizza_service import config
from pizza_service.database import Deadline, get_session
from pizza_service.domain import Diner, Order, OrderItemRequest, OrderRequest
from pizza_service.routes.auth import get_current_diner
from pizza_service.services.catalog import get_menu
from pizza_service.services.order_service import create_order, get_orders

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MenuItemResponse(CamelModel):
    id: int
    title: str
    description: str
    image: Optional[str] = None
    price: float


class OrderItemBody(CamelModel):
    description: str
    price: float
    menu_id: Optional[int] = None  # accepted but never trusted


class OrderCreateRequest(CamelModel):
    franchise_id: int
    store_id: int
    items: List[OrderItemBody] = []


class OrderItemResponse(CamelModel):
    menu_id: int
    description: str
    price: float


class OrderResponse(CamelModel):
    id: int
    franchise_id: int
    store_id: int
    date: datetime
    items: List[OrderItemResponse]


class OrderCreateResponse(CamelModel):
    order: OrderResponse


class DinerOrdersResponse(CamelModel):
    diner_id: int
    orders: List[OrderResponse]
    page: int


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        franchise_id=order.franchise_id,
        store_id=order.store_id,
        date=order.date,
        items=[
            OrderItemResponse(menu_id=item.menu_id, description=item.description, price=item.price)
            for item in order.items
        ],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/order/menu", response_model=List[MenuItemResponse])
def list_menu(session: Session = Depends(get_session)):
    """Get the menu catalog."""
    return get_menu(session)


@router.get("/order", response_model=DinerOrdersResponse)
def list_orders(
    page: Optional[str] = Query(None, description="1-based page; missing, non-numeric or < 1 reads page 1"),
    diner: Diner = Depends(get_current_diner),
    session: Session = Depends(get_session),
):
    """Get one page of the authenticated diner's orders with their items."""
    result = get_orders(session, diner, page=page)
    return DinerOrdersResponse(
        diner_id=result.diner_id,
        orders=[_order_response(o) for o in result.orders],
        page=result.page,
    )


@router.post("/order", response_model=OrderCreateResponse)
def place_order(
    request: OrderCreateRequest,
    diner: Diner = Depends(get_current_diner),
    session: Session = Depends(get_session),
):
    """
    Create an order for the authenticated diner.

    Each item's menu id is resolved from its description; an unknown
    description fails the whole order with 404 and nothing is stored.
    """
    order_request = OrderRequest(
        franchise_id=request.franchise_id,
        store_id=request.store_id,
        items=[
            OrderItemRequest(description=i.description, price=i.price, menu_id=i.menu_id) for i in request.items
        ],
    )
    deadline = Deadline(config.DB_TIMEOUT_SECONDS) if config.DB_TIMEOUT_SECONDS > 0 else None

    order = create_order(session, diner, order_request, deadline=deadline)
    return OrderCreateResponse(order=_order_response(order))
