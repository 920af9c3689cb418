"""
Order creation and order history for diners.

An order is one `diner_order` row plus one `order_item` row per line item.
Creation is all-or-nothing: every item is resolved against the menu before
the first write, the parent is flushed before its children so they can carry
its id, and any failure after that rolls the whole unit back.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from pizza_service import config
from pizza_service.database import Deadline, statement_deadline, translate_db_errors
from pizza_service.domain import Diner, DinerOrders, Order, OrderItem, OrderRequest
from pizza_service.errors import NotFound
from pizza_service.models.diner_order import DinerOrder
from pizza_service.models.order_item import OrderItemRow
from pizza_service.services.catalog import get_catalog_entry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp_page(page) -> int:
    """Pages are 1-based; absent, unparseable or < 1 all mean page 1."""
    try:
        page = int(page)
    except (TypeError, ValueError):
        return 1
    return max(page, 1)


def get_offset(page, page_size: int) -> int:
    return (clamp_page(page) - 1) * page_size


def _resolve_items(session: Session, request: OrderRequest, deadline: Optional[Deadline]) -> List[OrderItem]:
    resolved = []
    for index, item in enumerate(request.items):
        try:
            entry = get_catalog_entry(session, "menu", "description", item.description, deadline=deadline)
        except NotFound as e:
            raise NotFound(f"Order item {index} ({item.description!r}) is not on the menu: {e}") from e
        resolved.append(OrderItem(menu_id=entry.id, description=item.description, price=item.price))
    return resolved


def create_order(
    session: Session,
    diner: Diner,
    request: OrderRequest,
    deadline: Optional[Deadline] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> Order:
    """
    Create an order and its line items for `diner` in one transaction.

    Client-supplied menu ids are ignored; each item is persisted with the id
    its description resolves to in the menu.

    With a `deadline`, the budget is checked before every statement and is
    also handed to the driver so a statement still running when it expires
    is cut off.

    Raises:
        ValidationError: empty item list or bad item (before any write)
        NotFound: an item description is not on the menu (nothing persisted)
        Timeout: `deadline` expired (everything written so far rolled back)
        ConnectivityError: storage failure (everything written so far rolled back)
    """
    request.validate()

    try:
        with translate_db_errors("create_order"), statement_deadline(session, deadline):
            items = _resolve_items(session, request, deadline)

            if deadline is not None:
                deadline.check("inserting order")
            order_row = DinerOrder(
                diner_id=diner.id,
                franchise_id=request.franchise_id,
                store_id=request.store_id,
                date=clock(),
            )
            session.add(order_row)
            # Parent id must exist before children reference it
            session.flush()
            order_id = order_row.id
            order_date = order_row.date

            for item in items:
                if deadline is not None:
                    deadline.check("inserting order items")
                session.add(
                    OrderItemRow(
                        order_id=order_id,
                        menu_id=item.menu_id,
                        description=item.description,
                        price=item.price,
                    )
                )
            session.flush()

            if deadline is not None:
                deadline.check("committing order")
            session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(f"Order for diner {diner.id} rolled back: {e}")
        raise

    logger.info(f"Created order {order_id} for diner {diner.id} with {len(items)} item(s)")
    return Order(
        id=order_id,
        franchise_id=request.franchise_id,
        store_id=request.store_id,
        date=order_date,
        items=items,
    )


def get_orders(session: Session, diner: Diner, page=1, page_size: Optional[int] = None) -> DinerOrders:
    """
    Return one page of the diner's orders, oldest first, with their items.

    `page` is clamped to >= 1 so page 0, negative and missing pages all read
    from offset 0. Items are loaded for the whole page in one follow-up query.
    """
    page = clamp_page(page)
    if page_size is None:
        page_size = config.ORDER_PAGE_SIZE
    offset = get_offset(page, page_size)

    with translate_db_errors("get_orders"):
        order_rows = session.exec(
            select(DinerOrder)
            .where(DinerOrder.diner_id == diner.id)
            .options(selectinload(DinerOrder.items))
            .order_by(DinerOrder.id)
            .offset(offset)
            .limit(page_size)
        ).all()

        orders = [
            Order(
                id=row.id,
                franchise_id=row.franchise_id,
                store_id=row.store_id,
                date=row.date,
                items=[OrderItem(menu_id=i.menu_id, description=i.description, price=i.price) for i in row.items],
            )
            for row in order_rows
        ]

    return DinerOrders(diner_id=diner.id, orders=orders, page=page)
