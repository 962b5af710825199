"""Pytest fixtures for testing"""

import os

# Point the module-level engine at an in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["INTEGRATION_WORKER_ENABLED"] = "false"

from datetime import date, datetime, timedelta
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from discount_gateway.api.dependencies import get_clock, get_scheduler
from discount_gateway.api.main import create_app
from discount_gateway.domain.enums import CreditLineRole, PersonType
from discount_gateway.domain.models import (
    BankAccount,
    Check,
    Client,
    ClientRef,
    CreditLine,
    Order,
    OrderExpenses,
    Party,
)
from discount_gateway.infrastructure.database.models import Base
from discount_gateway.infrastructure.database.session import SessionLocal, engine, get_db
from discount_gateway.services.checks import CheckService
from discount_gateway.services.clients import ClientService
from discount_gateway.services.integration import InMemoryIntegrationQueue
from discount_gateway.services.operations import OperationService
from discount_gateway.services.orders import OrderService
from discount_gateway.services.worker import IntegrationWorker

VALID_CPF = "529.982.247-25"
VALID_CNPJ = "11.222.333/0001-81"
INVALID_CPF = "529.982.247-26"


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 15, 10, 0, 0))


@pytest.fixture
def today(clock: FakeClock) -> date:
    return clock.now.date()


@pytest.fixture
def queue() -> InMemoryIntegrationQueue:
    return InMemoryIntegrationQueue()


@pytest.fixture
def worker(db: Session, clock: FakeClock) -> IntegrationWorker:
    return IntegrationWorker(SessionLocal, clock=clock)


@pytest.fixture
def client_service(db: Session, clock: FakeClock) -> ClientService:
    return ClientService(db, clock=clock)


@pytest.fixture
def order_service(db: Session, queue: InMemoryIntegrationQueue, clock: FakeClock) -> OrderService:
    return OrderService(db, scheduler=queue, clock=clock)


@pytest.fixture
def check_service(db: Session, clock: FakeClock) -> CheckService:
    return CheckService(db, clock=clock)


@pytest.fixture
def operation_service(db: Session, queue: InMemoryIntegrationQueue, clock: FakeClock) -> OperationService:
    return OperationService(db, scheduler=queue, clock=clock)


@pytest.fixture
def make_client() -> Callable[..., Client]:
    """Unsaved client with generous credit lines"""

    def _make(code: int = 1001, document: str = VALID_CPF, **overrides) -> Client:
        fields = dict(
            code=code,
            name="Maria da Silva",
            person_type=PersonType.INDIVIDUAL,
            document=document,
            credit_lines={
                CreditLineRole.DRAWER: CreditLine(ceiling=50_000.0, utilized=10_000.0),
                CreditLineRole.ENDORSER: CreditLine(ceiling=100_000.0, utilized=20_000.0),
            },
            bank_account=BankAccount(number="12345-6", bank="001", agency="0001"),
        )
        fields.update(overrides)
        return Client(**fields)

    return _make


@pytest.fixture
def make_order() -> Callable[..., Order]:
    def _make(number: int = 5001, client_code: int = 1001, **overrides) -> Order:
        fields = dict(
            number=number,
            client=ClientRef(code=client_code),
            rate=3.5,
            expenses=OrderExpenses(total=150.0),
        )
        fields.update(overrides)
        return Order(**fields)

    return _make


@pytest.fixture
def make_check(today: date) -> Callable[..., Check]:
    def _make(
        number: str = "000123",
        order_number: int = 5001,
        client_code: int = 1001,
        **overrides,
    ) -> Check:
        fields = dict(
            id="",
            number=number,
            bank_code="001",
            amount=2_500.0,
            order_number=order_number,
            client_code=client_code,
            drawer=Party(name="João Pereira", document=VALID_CPF, person_type=PersonType.INDIVIDUAL),
            due_date=today + timedelta(days=30),
        )
        fields.update(overrides)
        return Check(**fields)

    return _make


@pytest.fixture
def registered_client(client_service: ClientService, make_client) -> Client:
    return client_service.register(make_client())


@pytest.fixture
def pending_order(order_service: OrderService, registered_client: Client, make_order) -> Order:
    return order_service.create(make_order(), actor="operador")


@pytest.fixture
def client(
    db: Session,
    queue: InMemoryIntegrationQueue,
    clock: FakeClock,
) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_scheduler] = lambda: queue
    app.dependency_overrides[get_clock] = lambda: clock
    return TestClient(app)
