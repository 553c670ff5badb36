"""
Pytest configuration and fixtures for the travel group expense tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import jwt
import pytest
from decimal import Decimal
from typing import Iterable, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.db.database import Base, get_db, enable_sqlite_foreign_keys
from app.models import expenses as _expense_models  # noqa: F401  registers tables
from app.schemas.group_schema import GroupCreate, GroupMemberCreate
from app.services.group_service import create_group, add_member_to_group
from app.utils.ledger import LedgerExpense, LedgerShare


def make_expense(paid_by: str, shares: Iterable[Tuple], amount=None, expense_id: str = "") -> LedgerExpense:
    """
    Build a ledger snapshot expense.

    shares: (user_id, amount) or (user_id, amount, is_paid) tuples
    """
    ledger_shares = tuple(
        LedgerShare(
            id=f"{expense_id or paid_by}-{share[0]}",
            user_id=share[0],
            amount=Decimal(str(share[1])),
            is_paid=share[2] if len(share) > 2 else False
        )
        for share in shares
    )
    total = Decimal(str(amount)) if amount is not None else sum((s.amount for s in ledger_shares), Decimal("0"))
    return LedgerExpense(id=expense_id, paid_by=paid_by, amount=total, shares=ledger_shares)


def make_token(user_id: str) -> str:
    return jwt.encode({"user_id": user_id}, settings.secret_key, algorithm=settings.jwt_algorithm)


def auth_headers(user_id: str) -> dict:
    return {"access-token": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def trip_group(db_session):
    """A USD travel group: alice (organizer), bob and carol"""
    group = create_group(
        db_session,
        GroupCreate(name="Lisbon Trip", destination="Lisbon", default_currency="USD", display_name="Alice"),
        "alice"
    )
    add_member_to_group(db_session, group.id, GroupMemberCreate(user_id="bob", display_name="Bob"))
    add_member_to_group(db_session, group.id, GroupMemberCreate(user_id="carol", display_name="Carol"))
    return group


@pytest.fixture
def client(engine):
    from app.main import app

    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
