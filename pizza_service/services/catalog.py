"""
Catalog lookups: natural key -> numeric id.

Table and column names come from a fixed whitelist of table models; only the
key value is ever bound from caller data, and always as a parameter.
"""
import logging
from typing import Dict, List, Optional, Type

from sqlmodel import Session, SQLModel, select

from pizza_service.database import Deadline, translate_db_errors
from pizza_service.domain import CatalogEntry
from pizza_service.errors import NotFound
from pizza_service.models.menu_item import MenuItem

logger = logging.getLogger(__name__)

CATALOG_TABLES: Dict[str, Type[SQLModel]] = {
    "menu": MenuItem,
}


def _catalog_column(table: str, key_column: str):
    model = CATALOG_TABLES.get(table)
    if model is None:
        raise ValueError(f"Unknown catalog table: {table}")
    if key_column not in model.__table__.columns:
        raise ValueError(f"Unknown column {key_column} on catalog table {table}")
    return model, getattr(model, key_column)


def resolve_id(
    session: Session,
    table: str,
    key_column: str,
    key_value,
    deadline: Optional[Deadline] = None,
) -> int:
    """
    Look up the id of the row in `table` whose `key_column` equals `key_value`.

    When several rows share the key, the lowest id wins.

    Raises:
        NotFound: no row carries the key
        ConnectivityError / Timeout: storage failure (never retried here)
    """
    model, column = _catalog_column(table, key_column)
    if deadline is not None:
        deadline.check(f"resolving {table}.{key_column}")

    with translate_db_errors("resolve_id"):
        found = session.exec(select(model.id).where(column == key_value).order_by(model.id)).first()

    if found is None:
        logger.warning(f"No ID found in {table} for {key_column}={key_value!r}")
        raise NotFound(f"No ID found in {table} for {key_column}={key_value!r}")
    return found


def get_catalog_entry(
    session: Session, table: str, key_column: str, key_value, deadline: Optional[Deadline] = None
) -> CatalogEntry:
    """Resolve a natural key and return it paired with its id."""
    return CatalogEntry(id=resolve_id(session, table, key_column, key_value, deadline=deadline), natural_key=key_value)


def get_menu(session: Session) -> List[MenuItem]:
    with translate_db_errors("get_menu"):
        return list(session.exec(select(MenuItem).order_by(MenuItem.id)).all())


def add_menu_item(
    session: Session, title: str, description: str, price: float, image: Optional[str] = None
) -> MenuItem:
    """Insert a catalog entry (seeding / admin tooling)."""
    item = MenuItem(title=title, description=description, image=image, price=price)
    with translate_db_errors("add_menu_item"):
        try:
            session.add(item)
            session.commit()
            session.refresh(item)
        except Exception:
            session.rollback()
            raise
    return item
