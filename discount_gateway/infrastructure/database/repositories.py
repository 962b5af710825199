"""Data access layer for workflow entities.

Every write path applies the entity's save-time invariants before touching
the database, and status changes go through `update_if_status`, a single
conditional UPDATE guarded by the expected current status.
"""

from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from discount_gateway.domain import checks as check_rules
from discount_gateway.domain import operations as operation_rules
from discount_gateway.domain import orders as order_rules
from discount_gateway.domain.enums import (
    CheckStatus,
    ClientStatus,
    OperationStatus,
    OperationType,
    OrderOrigin,
    OrderStatus,
    PersonType,
)
from discount_gateway.domain.exceptions import DuplicateKeyError
from discount_gateway.domain.models import Check, Client, Operation, Order
from discount_gateway.infrastructure.database import mappers
from discount_gateway.infrastructure.database.models import (
    CheckRecord,
    ClientRecord,
    OperationRecord,
    OrderRecord,
)


def _status_values(statuses: Iterable) -> List[str]:
    return [s.value for s in statuses]


class _Repository:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self, row, what: str) -> None:
        try:
            self.db.add(row)
            self.db.flush()  # Surface uniqueness violations now
        except IntegrityError as e:
            raise DuplicateKeyError(f"{what} já existe") from e

    def _conditional_update(self, model, key_column, key, allowed_from, values) -> bool:
        """
        UPDATE <table> SET ... WHERE <key> = :key AND status IN (:allowed_from)

        Returns False when no row matched, i.e. the record moved on since it
        was read. Callers control commit/rollback.
        """
        try:
            rowcount = (
                self.db.query(model)
                .filter(key_column == key)
                .filter(model.status.in_(_status_values(allowed_from)))
                .update(values, synchronize_session=False)
            )
        except IntegrityError as e:
            raise DuplicateKeyError("Violação de unicidade na atualização") from e
        return bool(rowcount)


class ClientRepository(_Repository):
    """Repository for clients"""

    def get(self, code: int) -> Optional[Client]:
        row = (
            self.db.query(ClientRecord)
            .populate_existing()
            .filter(ClientRecord.code == code)
            .first()
        )
        return mappers.client_from_record(row) if row else None

    def get_by_document(self, document: str) -> Optional[Client]:
        row = self.db.query(ClientRecord).filter(ClientRecord.document == document).first()
        return mappers.client_from_record(row) if row else None

    def find(
        self,
        status: Optional[ClientStatus] = None,
        person_type: Optional[PersonType] = None,
        branch_code: Optional[str] = None,
        limit: int = 50,
    ) -> List[Client]:
        query = self.db.query(ClientRecord)
        if status is not None:
            query = query.filter(ClientRecord.status == status.value)
        if person_type is not None:
            query = query.filter(ClientRecord.person_type == person_type.value)
        rows = query.order_by(ClientRecord.code).all()
        clients = [mappers.client_from_record(r) for r in rows]
        if branch_code is not None:
            # Branch lives inside a JSON block; filter after load for portability
            clients = [c for c in clients if c.branch.code == branch_code]
        return clients[:limit]

    def create(self, client: Client) -> Client:
        row = ClientRecord(**mappers.client_values(client))
        if client.registered_at is not None:
            row.registered_at = client.registered_at
        self._insert(row, f"Cliente {client.code}")
        return mappers.client_from_record(row)

    def update_if_status(self, client: Client, allowed_from: Iterable[ClientStatus]) -> bool:
        values = mappers.client_values(client)
        values.pop("code")
        return self._conditional_update(
            ClientRecord, ClientRecord.code, client.code, allowed_from, values
        )


class OrderRepository(_Repository):
    """Repository for credit orders"""

    def get(self, number: int) -> Optional[Order]:
        row = (
            self.db.query(OrderRecord)
            .populate_existing()
            .filter(OrderRecord.number == number)
            .first()
        )
        return mappers.order_from_record(row) if row else None

    def find(
        self,
        status: Optional[OrderStatus] = None,
        client_code: Optional[int] = None,
        origin: Optional[OrderOrigin] = None,
        limit: int = 50,
    ) -> List[Order]:
        query = self.db.query(OrderRecord)
        if status is not None:
            query = query.filter(OrderRecord.status == status.value)
        if client_code is not None:
            query = query.filter(OrderRecord.client_code == client_code)
        if origin is not None:
            query = query.filter(OrderRecord.origin == origin.value)
        rows = query.order_by(OrderRecord.created_at.desc()).limit(limit).all()
        return [mappers.order_from_record(r) for r in rows]

    def create(self, order: Order) -> Order:
        order_rules.recompute_expenses(order)
        row = OrderRecord(**mappers.order_values(order))
        if order.created_at is not None:
            row.created_at = order.created_at
        self._insert(row, f"Ordem {order.number}")
        return mappers.order_from_record(row)

    def update_if_status(self, order: Order, allowed_from: Iterable[OrderStatus]) -> bool:
        order_rules.recompute_expenses(order)
        values = mappers.order_values(order)
        values.pop("number")
        return self._conditional_update(
            OrderRecord, OrderRecord.number, order.number, allowed_from, values
        )


class CheckRepository(_Repository):
    """Repository for checks"""

    def get(self, check_id: str) -> Optional[Check]:
        row = (
            self.db.query(CheckRecord)
            .populate_existing()
            .filter(CheckRecord.id == check_id)
            .first()
        )
        return mappers.check_from_record(row) if row else None

    def get_by_number(self, number: str, bank_code: str) -> Optional[Check]:
        row = (
            self.db.query(CheckRecord)
            .filter(CheckRecord.number == number, CheckRecord.bank_code == bank_code)
            .first()
        )
        return mappers.check_from_record(row) if row else None

    def find(
        self,
        status: Optional[CheckStatus] = None,
        order_number: Optional[int] = None,
        client_code: Optional[int] = None,
        limit: int = 100,
    ) -> List[Check]:
        query = self.db.query(CheckRecord).populate_existing()
        if status is not None:
            query = query.filter(CheckRecord.status == status.value)
        if order_number is not None:
            query = query.filter(CheckRecord.order_number == order_number)
        if client_code is not None:
            query = query.filter(CheckRecord.client_code == client_code)
        rows = query.order_by(CheckRecord.created_at).limit(limit).all()
        return [mappers.check_from_record(r) for r in rows]

    def for_order(self, order_number: int) -> List[Check]:
        """All checks attached to an order, oldest first"""
        rows = (
            self.db.query(CheckRecord)
            .populate_existing()
            .filter(CheckRecord.order_number == order_number)
            .order_by(CheckRecord.created_at)
            .all()
        )
        return [mappers.check_from_record(r) for r in rows]

    def create(self, check: Check) -> Check:
        check_rules.refresh_document_validity(check)
        row = CheckRecord(**mappers.check_values(check))
        if check.created_at is not None:
            row.created_at = check.created_at
        self._insert(row, f"Cheque {check.number}/{check.bank_code}")
        return mappers.check_from_record(row)

    def update_if_status(self, check: Check, allowed_from: Iterable[CheckStatus]) -> bool:
        check_rules.refresh_document_validity(check)
        values = mappers.check_values(check)
        values.pop("id")
        return self._conditional_update(
            CheckRecord, CheckRecord.id, check.id, allowed_from, values
        )


class OperationRepository(_Repository):
    """Repository for operations"""

    def get(self, operation_id: str) -> Optional[Operation]:
        row = (
            self.db.query(OperationRecord)
            .populate_existing()
            .filter(OperationRecord.id == operation_id)
            .first()
        )
        return mappers.operation_from_record(row) if row else None

    def get_by_number(self, number: str) -> Optional[Operation]:
        row = (
            self.db.query(OperationRecord)
            .populate_existing()
            .filter(OperationRecord.number == number)
            .first()
        )
        return mappers.operation_from_record(row) if row else None

    def find(
        self,
        status: Optional[OperationStatus] = None,
        type: Optional[OperationType] = None,
        client_code: Optional[int] = None,
        order_number: Optional[int] = None,
        limit: int = 50,
    ) -> List[Operation]:
        query = self.db.query(OperationRecord)
        if status is not None:
            query = query.filter(OperationRecord.status == status.value)
        if type is not None:
            query = query.filter(OperationRecord.type == type.value)
        if client_code is not None:
            query = query.filter(OperationRecord.client_code == client_code)
        if order_number is not None:
            query = query.filter(OperationRecord.order_number == order_number)
        rows = query.order_by(OperationRecord.created_at.desc()).limit(limit).all()
        return [mappers.operation_from_record(r) for r in rows]

    def create(self, operation: Operation) -> Operation:
        operation_rules.recompute_derived(operation)
        row = OperationRecord(**mappers.operation_values(operation))
        if operation.created_at is not None:
            row.created_at = operation.created_at
        self._insert(row, f"Operação {operation.number}")
        return mappers.operation_from_record(row)

    def update_if_status(
        self, operation: Operation, allowed_from: Iterable[OperationStatus]
    ) -> bool:
        operation_rules.recompute_derived(operation)
        values = mappers.operation_values(operation)
        values.pop("id")
        return self._conditional_update(
            OperationRecord, OperationRecord.id, operation.id, allowed_from, values
        )
