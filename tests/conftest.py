import os

# Keep the app's own engine off disk; tests use test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from pizza_service.database import get_session  # noqa: E402
from pizza_service.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables are created before and dropped after every test, so row counts
#    in one test never see another test's orders or sessions
# 4. App dependency overridden to use test_engine (see client_fixture)
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    # Import all models to ensure they're registered BEFORE create_all
    from pizza_service.models.auth_session import AuthSession  # noqa: F401
    from pizza_service.models.diner_order import DinerOrder  # noqa: F401
    from pizza_service.models.menu_item import MenuItem  # noqa: F401
    from pizza_service.models.order_item import OrderItemRow  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session"""
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def menu(session: Session):
    """Menu where "pizza" resolves to id 3"""
    from pizza_service.services.catalog import add_menu_item

    veggie = add_menu_item(session, title="Veggie", description="veggie", price=0.0038, image="pizza1.png")
    pepperoni = add_menu_item(session, title="Pepperoni", description="pepperoni", price=0.0042, image="pizza2.png")
    pizza = add_menu_item(session, title="Margarita", description="pizza", price=0.0035, image="pizza3.png")
    return {"veggie": veggie.id, "pepperoni": pepperoni.id, "pizza": pizza.id}


class ExplodingSession:
    """Stand-in session that fails the test if any storage call is made"""

    def __getattr__(self, name):
        raise AssertionError(f"unexpected storage access: session.{name}")


@pytest.fixture
def exploding_session():
    return ExplodingSession()
