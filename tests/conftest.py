"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from canteen_gateway.api.main import create_app
from canteen_gateway.api.dependencies import get_auto_order_engine, get_current_user_id
from canteen_gateway.config import settings
from canteen_gateway.infrastructure.database.models import Base, MenuItem, RecurringOrder, User
from canteen_gateway.infrastructure.database.session import get_db
from canteen_gateway.services.auto_order_engine import AutoOrderEngine


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CURRENT_USER_ID = "user_1"


@pytest.fixture(autouse=True)
def trigger_settings(monkeypatch):
    """Development mode with no trigger secret unless a test says otherwise"""
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "cron_secret", None)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory for extra sessions against the test database"""
    return TestingSessionLocal


@pytest.fixture
def auto_order_engine(session_factory: sessionmaker) -> AutoOrderEngine:
    """Engine bound to the test database; each transaction gets its own session"""
    return AutoOrderEngine(session_factory=session_factory)


@pytest.fixture
def client(db: Session, auto_order_engine: AutoOrderEngine) -> TestClient:
    """Create FastAPI test client with test database and a signed-in user"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: CURRENT_USER_ID
    app.dependency_overrides[get_auto_order_engine] = lambda: auto_order_engine
    return TestClient(app)


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    """Insert a user with a wallet balance"""

    def _make(user_id: str = CURRENT_USER_ID, wallet_balance: str = "200") -> User:
        user = User(
            id=user_id,
            name="Asha Rao",
            email=f"{user_id}@campus.edu",
            roll_number="CS21B042",
            wallet_balance=Decimal(wallet_balance),
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_menu_item(db: Session) -> Callable[..., MenuItem]:
    """Insert a catalog item"""

    def _make(item_id: str = "item_dosa", name: str = "Masala Dosa", price: str = "50", is_available: bool = True) -> MenuItem:
        item = MenuItem(id=item_id, name=name, price=Decimal(price), is_available=is_available)
        db.add(item)
        db.commit()
        return item

    return _make


@pytest.fixture
def make_auto_order(db: Session) -> Callable[..., RecurringOrder]:
    """Insert a recurring order directly, bypassing the API"""

    def _make(
        user_id: str = CURRENT_USER_ID,
        item_price: str = "50",
        quantity: int = 2,
        time: str = "08:00",
        frequency: str = "daily",
        custom_days: Optional[List[str]] = None,
        status: str = "active",
        last_executed_date: Optional[str] = None,
    ) -> RecurringOrder:
        now = datetime.now(timezone.utc)
        order = RecurringOrder(
            user_id=user_id,
            item_id="item_dosa",
            item_name="Masala Dosa",
            item_price=Decimal(item_price),
            quantity=quantity,
            time=time,
            frequency=frequency,
            custom_days=custom_days or [],
            status=status,
            last_executed_date=last_executed_date,
            total_executions=0,
            total_failures=0,
            created_at=now,
            updated_at=now,
        )
        db.add(order)
        db.commit()
        return order

    return _make
