import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlmodel import Session, SQLModel, create_engine

from pizza_service.config import DATABASE_URL, SQL_ECHO
from pizza_service.errors import ConnectivityError, Timeout

logger = logging.getLogger(__name__)

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}

if _is_sqlite and ":memory:" not in DATABASE_URL:
    db_path = DATABASE_URL.replace("sqlite:///", "", 1)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

engine: Engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    connect_args=_connect_args,
    pool_pre_ping=not _is_sqlite,
)

# Driver messages that mean the statement was cut off by a time limit
_TIMEOUT_MARKERS = ("timeout", "timed out", "interrupted", "database is locked")

# SQLite VM instructions between deadline polls while a statement runs
_SQLITE_PROGRESS_STEPS = 4


@contextmanager
def session_scope(bind: Optional[Engine] = None) -> Iterator[Session]:
    """
    Scoped session with guaranteed release.

    Rolls back on any exception and always closes the session.
    """
    session = Session(bind or engine)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with session_scope() as session:
        yield session


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    """
    Classify driver-level failures raised inside the block.

    Lost connections and other operational failures become ConnectivityError,
    time-limit failures become Timeout. Data errors (integrity violations etc.)
    propagate unchanged.
    """
    try:
        yield
    except (OperationalError, InterfaceError, DisconnectionError) as e:
        message = str(getattr(e, "orig", None) or e).lower()
        if any(marker in message for marker in _TIMEOUT_MARKERS):
            logger.warning(f"{operation}: storage timed out: {message}")
            raise Timeout(f"{operation} timed out") from e
        logger.error(f"{operation}: storage unavailable: {message}")
        raise ConnectivityError(f"{operation} failed: storage unavailable") from e


class Deadline:
    """
    Caller-supplied time limit for a multi-statement operation.

    `check()` is called before each storage round-trip; once the budget is
    spent it raises Timeout so the caller can roll back.
    """

    def __init__(self, seconds: float, clock=time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self._clock() >= self.expires_at

    def check(self, operation: str) -> None:
        if self.expired():
            raise Timeout(f"Deadline exceeded before {operation}")


@contextmanager
def statement_deadline(session: Session, deadline: Optional[Deadline]) -> Iterator[None]:
    """
    Let the driver cut off a statement that is still running at the deadline.

    PostgreSQL gets a transaction-scoped `statement_timeout` sized to the
    remaining budget. SQLite polls the deadline from a progress handler and
    interrupts the running statement once it has passed. The resulting driver
    error is classified as Timeout by translate_db_errors. Other dialects
    rely on Deadline.check() between statements.
    """
    if deadline is None:
        yield
        return

    deadline.check("starting transaction")
    connection = session.connection()
    dialect = connection.dialect.name
    raw = None

    if dialect == "postgresql":
        timeout_ms = max(1, int(deadline.remaining() * 1000))
        connection.exec_driver_sql(f"SET LOCAL statement_timeout = {timeout_ms}")
    elif dialect == "sqlite":
        raw = connection.connection.dbapi_connection
        raw.set_progress_handler(lambda: 1 if deadline.expired() else 0, _SQLITE_PROGRESS_STEPS)
    else:
        logger.debug(f"No driver-side statement timeout for dialect {dialect}")

    try:
        yield
    finally:
        if raw is not None:
            raw.set_progress_handler(None, 0)


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize database - create all tables"""
    # Import all models to ensure they're registered with SQLModel metadata
    from pizza_service.models.auth_session import AuthSession  # noqa: F401
    from pizza_service.models.diner_order import DinerOrder  # noqa: F401
    from pizza_service.models.menu_item import MenuItem  # noqa: F401
    from pizza_service.models.order_item import OrderItemRow  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
