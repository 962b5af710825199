"""Operation lifecycle service"""

import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from discount_gateway.config import settings
from discount_gateway.domain import operations as rules
from discount_gateway.domain.enums import LogAction, OperationStatus, OperationType
from discount_gateway.domain.exceptions import (
    DomainException,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.domain.models import LogEntry, Operation, ValidationResult
from discount_gateway.domain.patches import OperationPatch
from discount_gateway.infrastructure.database.repositories import (
    CheckRepository,
    ClientRepository,
    OperationRepository,
    OrderRepository,
)
from discount_gateway.infrastructure.observability.logging import log_integration
from discount_gateway.infrastructure.observability.metrics import (
    record_integration,
    record_validation_failure,
)
from discount_gateway.services.base import LifecycleService, latency_seconds, unit_of_work
from discount_gateway.services.integration import OPERATION, IntegrationRequested, IntegrationScheduler

logger = logging.getLogger(__name__)


class OperationService(LifecycleService):
    entity = "operation"

    def __init__(self, db, scheduler: Optional[IntegrationScheduler] = None, clock=None):
        super().__init__(db, clock)
        self.scheduler = scheduler
        self.operations = OperationRepository(db)
        self.orders = OrderRepository(db)
        self.clients = ClientRepository(db)
        self.checks = CheckRepository(db)

    def get(self, operation_id: str) -> Operation:
        operation = self.operations.get(operation_id)
        if operation is None:
            raise NotFoundError(f"Operação {operation_id} não encontrada")
        return operation

    def get_by_number(self, number: str) -> Operation:
        operation = self.operations.get_by_number(number)
        if operation is None:
            raise NotFoundError(f"Operação {number} não encontrada")
        return operation

    def list(
        self,
        status: Optional[OperationStatus] = None,
        type: Optional[OperationType] = None,
        client_code: Optional[int] = None,
        order_number: Optional[int] = None,
        limit: int = 50,
    ) -> List[Operation]:
        return self.operations.find(
            status=status, type=type, client_code=client_code, order_number=order_number, limit=limit
        )

    def create(self, operation: Operation, actor: Optional[str] = None) -> Operation:
        """Open a pending operation for an existing order and client"""
        actor = self.actor_or_default(actor)
        with unit_of_work(self.db):
            if self.orders.get(operation.order_number) is None:
                raise NotFoundError(f"Ordem {operation.order_number} não encontrada")
            if self.clients.get(operation.client_code) is None:
                raise NotFoundError(f"Cliente {operation.client_code} não encontrado")

            now = self.now()
            operation.id = operation.id or str(uuid.uuid4())
            operation.number = operation.number or rules.generate_operation_number(now)
            operation.status = OperationStatus.PENDING
            operation.created_at = now
            operation.actor = actor
            rules.add_log(operation, LogAction.CREATED, actor, "Operação criada", now)
            created = self.operations.create(operation)
        self.transitioned(created.id, None, created.status, actor)
        return created

    def update(self, operation_id: str, patch: OperationPatch) -> Operation:
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            rules.ensure_editable(operation)
            current = operation.status
            patch.apply_to(operation)
            self.ensure_applied(self.operations.update_if_status(operation, [current]), operation_id)
        return operation

    def calculate_effective_rate(self, operation_id: str, actor: Optional[str] = None) -> Dict[str, float]:
        """Compute and store the effective rate; reports it next to the nominal one"""
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            rules.ensure_editable(operation)
            effective = rules.calculate_effective_rate(operation)
            operation.rate.effective = effective
            rules.add_log(
                operation, LogAction.EFFECTIVE_RATE, actor, f"Taxa efetiva {effective:.4f}", self.now()
            )
            self.ensure_applied(
                self.operations.update_if_status(operation, [operation.status]), operation_id
            )
        return {
            "nominal": operation.rate.nominal,
            "effective": effective,
            "difference": effective - operation.rate.nominal,
        }

    def validate_limits(self, operation_id: str, max_limit: float) -> bool:
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            rules.ensure_editable(operation)
            within = rules.validate_limits(operation, max_limit)
            self.ensure_applied(
                self.operations.update_if_status(operation, [operation.status]), operation_id
            )
        if not within:
            record_validation_failure(self.entity)
        return within

    def validate_client(self, operation_id: str) -> ValidationResult:
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            rules.ensure_editable(operation)
            client = self.clients.get(operation.client_code)
            if client is None:
                raise NotFoundError(f"Cliente {operation.client_code} não encontrado")
            checks = [c for c in (self.checks.get(i) for i in operation.check_ids) if c is not None]
            result = rules.validate_against_client(operation, client, checks)
            self.ensure_applied(
                self.operations.update_if_status(operation, [operation.status]), operation_id
            )
        if not result.valid:
            record_validation_failure(self.entity)
        return result

    def approve(
        self,
        operation_id: str,
        actor: Optional[str] = None,
        max_limit: Optional[float] = None,
    ) -> Operation:
        """
        Approve a pending operation.

        When a ceiling is known (argument or configured default) the limit
        check is re-run first, so approval always judges the current totals.
        """
        max_limit = max_limit if max_limit is not None else settings.max_operation_limit
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            current = operation.status
            if max_limit is not None and current == OperationStatus.PENDING:
                rules.validate_limits(operation, max_limit)
            try:
                rules.approve_operation(operation, actor, self.now())
            except ValidationFailedError:
                record_validation_failure(self.entity)
                # Persist the refreshed limit flag before reporting the failure
                self.ensure_applied(self.operations.update_if_status(operation, [current]), operation_id)
                self.db.commit()
                raise
            self.ensure_applied(self.operations.update_if_status(operation, [current]), operation_id)
        self.transitioned(operation_id, current, operation.status, self.actor_or_default(actor))
        return operation

    def reject(self, operation_id: str, reason: str, actor: Optional[str] = None) -> Operation:
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            current = operation.status
            rules.reject_operation(operation, reason, actor, self.now())
            self.ensure_applied(self.operations.update_if_status(operation, [current]), operation_id)
        self.transitioned(operation_id, current, operation.status, self.actor_or_default(actor))
        return operation

    def integrate(self, operation_id: str, actor: Optional[str] = None) -> Operation:
        """Move an approved operation to processing and schedule completion"""
        actor = self.actor_or_default(actor)
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            current = operation.status
            rules.begin_integration(operation, actor, self.now())
            self.ensure_applied(
                self.operations.update_if_status(operation, [OperationStatus.APPROVED]), operation_id
            )

        self.transitioned(operation_id, current, operation.status, actor)
        if self.scheduler is not None:
            self.scheduler.schedule(
                IntegrationRequested(entity=OPERATION, key=operation_id, requested_at=self.now(), actor=actor)
            )
        else:
            logger.warning("No integration scheduler configured", extra={"operation": operation_id})
        return operation

    def complete_integration(self, operation_id: str, requested_at: Optional[datetime] = None) -> Operation:
        """Finalize a processing operation; a record that moved on is left alone"""
        operation = self.get(operation_id)
        if operation.status != OperationStatus.PROCESSING:
            return self._skipped(operation)

        now = self.now()
        try:
            with unit_of_work(self.db):
                rules.complete_integration(operation, now)
                applied = self.operations.update_if_status(operation, [OperationStatus.PROCESSING])
        except (DomainException, SQLAlchemyError) as e:
            logger.exception("Operation integration failed", extra={"operation": operation_id})
            return self._fail_integration(operation_id, str(e), requested_at)
        if not applied:
            return self._skipped(self.get(operation_id))

        self.transitioned(operation_id, OperationStatus.PROCESSING, operation.status, rules.SYSTEM_ACTOR)
        record_integration(self.entity, "integrated", latency_seconds(requested_at, now))
        log_integration(self.entity, operation.number, "integrated")
        return operation

    def add_log(
        self,
        operation_id: str,
        action: LogAction,
        actor: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> LogEntry:
        """Append an audit entry; allowed in any status"""
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            entry = rules.add_log(operation, action, actor, detail, self.now())
            self.ensure_applied(
                self.operations.update_if_status(operation, [operation.status]), operation_id
            )
        return entry

    def _fail_integration(self, operation_id: str, detail: str, requested_at: Optional[datetime]) -> Operation:
        with unit_of_work(self.db):
            operation = self.get(operation_id)
            if operation.status != OperationStatus.PROCESSING:
                return self._skipped(operation)
            now = self.now()
            rules.fail_integration(operation, detail, now)
            applied = self.operations.update_if_status(operation, [OperationStatus.PROCESSING])
        if not applied:
            return self._skipped(self.get(operation_id))

        self.transitioned(operation_id, OperationStatus.PROCESSING, operation.status, rules.SYSTEM_ACTOR)
        record_integration(self.entity, "error", latency_seconds(requested_at, now))
        log_integration(self.entity, operation.number, "error", detail)
        return operation

    def _skipped(self, operation: Operation) -> Operation:
        record_integration(self.entity, "skipped")
        log_integration(self.entity, operation.number, "skipped", f"status {operation.status.value}")
        return operation
