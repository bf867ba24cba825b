"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from registration_admin.api.main import create_app
from registration_admin.domain.exceptions import StoreError
from registration_admin.infrastructure.database.models import (
    Base,
    BankAccount,
    PaymentTransaction,
    Prospectus,
    Registration,
)
from registration_admin.infrastructure.database.store import SqlEntityStore


class FaultyStore:
    """Wraps a real store, records every call, and fails the (operation, table) pairs it is told to"""

    def __init__(self, inner: SqlEntityStore):
        self.inner = inner
        self.calls: List[Tuple[str, str, Any]] = []
        self.failures: Dict[Tuple[str, str], Optional[BaseException]] = {}

    def fail_on(self, operation: str, table: str, error: Optional[BaseException] = None) -> None:
        """Fail that call with ``error``, or a StoreError when none is given"""
        self.failures[(operation, table)] = error

    @property
    def writes(self) -> List[Tuple[str, str, Any]]:
        return [call for call in self.calls if call[0] in ("insert", "update", "delete")]

    def _enter(self, operation: str, table: str, record_id: Any = None) -> None:
        self.calls.append((operation, table, record_id))
        if (operation, table) in self.failures:
            raise self.failures[(operation, table)] or StoreError(f"injected {operation} failure on {table}")

    async def insert(self, table: str, record: Dict[str, Any]):
        self._enter("insert", table)
        return await self.inner.insert(table, record)

    async def update(self, table: str, record_id: Any, patch: Dict[str, Any]):
        self._enter("update", table, record_id)
        return await self.inner.update(table, record_id, patch)

    async def delete(self, table: str, record_id: Any) -> None:
        self._enter("delete", table, record_id)
        await self.inner.delete(table, record_id)

    async def get(self, table: str, record_id: Any, select: Optional[Sequence[str]] = None):
        self._enter("get", table, record_id)
        return await self.inner.get(table, record_id, select=select)

    async def find(self, table: str, filters=None, order_by=None, descending=False):
        self._enter("find", table)
        return await self.inner.find(table, filters=filters, order_by=order_by, descending=descending)


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """SQLite database per test"""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory: sessionmaker) -> FaultyStore:
    return FaultyStore(SqlEntityStore(session_factory))


@pytest.fixture
def seed(session_factory: sessionmaker) -> Callable[..., None]:
    """Insert ORM rows directly, bypassing the store"""

    def _seed(*rows) -> None:
        with session_factory() as db:
            db.add_all(rows)
            db.commit()

    return _seed


@pytest.fixture
def prospectus(seed) -> int:
    """Prospectus 7, not yet registered"""
    seed(Prospectus(id=7, client_name="Acme Traders", isregistered=False))
    return 7


@pytest.fixture
def existing_registration(seed) -> Dict[str, int]:
    """Registration 42 owning transaction 9, for prospectus 11"""
    seed(
        Prospectus(id=11, client_name="Northwind", isregistered=True),
        PaymentTransaction(id=9, transaction_type="neft", transaction_id="N900", amount=250, transaction_date=date(2024, 2, 1)),
    )
    seed(
        Registration(
            id=42,
            prospectus_id=11,
            transaction_id=9,
            total_amount=1000,
            status="pending",
        )
    )
    return {"registration_id": 42, "transaction_id": 9, "prospectus_id": 11}


@pytest.fixture
def bank_account(seed) -> int:
    seed(
        BankAccount(
            id=3,
            account_name="Collections",
            account_holder_name="Acme Services Pvt Ltd",
            account_number="001122334455",
            ifsc_code="HDFC0000123",
            bank="HDFC",
        )
    )
    return 3


@pytest.fixture
def client(store: FaultyStore) -> TestClient:
    """FastAPI test client over the SQLite-backed store"""
    app = create_app(store=store)
    return TestClient(app)


@pytest.fixture
def transaction_fields() -> Dict[str, Any]:
    return {
        "transaction_type": "upi",
        "transaction_id": "T100",
        "amount": 500,
        "transaction_date": date(2024, 1, 1),
    }


@pytest.fixture
def registration_fields(prospectus: int) -> Dict[str, Any]:
    return {"prospectus_id": prospectus, "total_amount": 1000, "status": "pending"}
