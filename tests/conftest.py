"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import configure_sqlite, get_db
from app.main import app
from app.models import SnapTradeConnection, User
from app.models.base import Base
from app.services.snaptrade_client import get_snaptrade_client


class FakeSnapTrade:
    """Stands in for ``snaptrade_client.SnapTrade``.

    Exposes the same API groups as the SDK; every method is a MagicMock,
    and ``respond`` sets what an SDK call returns.
    """

    def __init__(self):
        self.account_information = MagicMock()
        self.options = MagicMock()
        self.authentication = MagicMock()
        self.connections = MagicMock()
        self.api_status = MagicMock()

    @staticmethod
    def respond(method: MagicMock, body) -> None:
        method.return_value = MagicMock(body=body)


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def snaptrade():
    return FakeSnapTrade()


@pytest.fixture
def client(db_session, snaptrade):
    """Create a test client wired to the test database and fake SnapTrade."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_snaptrade_client] = lambda: snaptrade
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db_session):
    """An app user with default privacy settings."""
    user = User(id="user-1", username="trader", display_name="Trader")
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def connection(db_session, user):
    connection = SnapTradeConnection(
        snaptrade_connection_id="conn-1",
        user_id=user.id,
        snaptrade_user_id="st-user",
        brokerage_name="Fidelity",
    )
    db_session.add(connection)
    db_session.commit()
    return connection
