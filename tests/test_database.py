"""Tests for scoped sessions, error classification and deadlines."""

import pytest
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlmodel import Session, select

from pizza_service.database import Deadline, get_session, session_scope, statement_deadline, translate_db_errors
from pizza_service.errors import ConnectivityError, Timeout
from pizza_service.models.menu_item import MenuItem
from tests.conftest import test_engine


def test_session_scope_rolls_back_on_error(session: Session):
    with pytest.raises(RuntimeError):
        with session_scope(test_engine) as scoped:
            scoped.add(MenuItem(title="Ghost", description="ghost", price=1.0))
            scoped.flush()
            raise RuntimeError("boom")

    assert session.exec(select(MenuItem)).all() == []


def test_session_scope_commits_when_asked(session: Session):
    with session_scope(test_engine) as scoped:
        scoped.add(MenuItem(title="Real", description="real", price=1.0))
        scoped.commit()

    assert [m.description for m in session.exec(select(MenuItem)).all()] == ["real"]


def test_get_session_yields_scoped_session():
    sessions = get_session()
    scoped = next(sessions)
    assert isinstance(scoped, Session)

    with pytest.raises(RuntimeError):
        sessions.throw(RuntimeError("request failed"))


def test_translate_operational_error():
    with pytest.raises(ConnectivityError, match="get_orders failed"):
        with translate_db_errors("get_orders"):
            raise OperationalError("SELECT 1", {}, Exception("could not connect to server"))


def test_translate_interface_error():
    with pytest.raises(ConnectivityError):
        with translate_db_errors("issue_session"):
            raise InterfaceError("SELECT 1", {}, Exception("connection already closed"))


def test_translate_locked_database_to_timeout():
    with pytest.raises(Timeout):
        with translate_db_errors("create_order"):
            raise OperationalError("INSERT", {}, Exception("database is locked"))


def test_translate_leaves_other_errors_alone():
    with pytest.raises(KeyError):
        with translate_db_errors("create_order"):
            raise KeyError("x")


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_deadline_expiry():
    clock = FakeClock()
    deadline = Deadline(2.0, clock=clock)

    assert deadline.remaining() == 2.0
    deadline.check("first query")

    clock.now = 101.5
    assert deadline.remaining() == pytest.approx(0.5)
    assert not deadline.expired()

    clock.now = 102.0
    assert deadline.expired()
    assert deadline.remaining() == 0.0
    with pytest.raises(Timeout, match="second query"):
        deadline.check("second query")


class RecordingConnection:
    def __init__(self, dialect_name):
        self.dialect = type("Dialect", (), {"name": dialect_name})()
        self.statements = []

    def exec_driver_sql(self, statement):
        self.statements.append(statement)


class RecordingSession:
    def __init__(self, dialect_name):
        self.bound = RecordingConnection(dialect_name)

    def connection(self):
        return self.bound


def test_statement_deadline_sets_postgres_statement_timeout():
    clock = FakeClock()
    deadline = Deadline(2.5, clock=clock)
    session = RecordingSession("postgresql")

    with statement_deadline(session, deadline):
        pass

    assert session.bound.statements == ["SET LOCAL statement_timeout = 2500"]


def test_statement_deadline_without_deadline_touches_nothing(exploding_session):
    with statement_deadline(exploding_session, None):
        pass


def test_statement_deadline_already_expired(exploding_session):
    with pytest.raises(Timeout, match="starting transaction"):
        with statement_deadline(exploding_session, Deadline(0)):
            pass
