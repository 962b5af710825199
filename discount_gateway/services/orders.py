"""Order lifecycle service - integration orchestration and persistence"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from discount_gateway.domain import orders as rules
from discount_gateway.domain.enums import CheckStatus, OrderOrigin, OrderStatus
from discount_gateway.domain.exceptions import (
    DomainException,
    DuplicateKeyError,
    IntegrationFailureError,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.domain.models import Check, ClientRef, Operation, Order, ValidationResult
from discount_gateway.domain.operations import build_operation_from_order
from discount_gateway.domain.patches import OrderPatch
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
from discount_gateway.services.integration import ORDER, IntegrationRequested, IntegrationScheduler

logger = logging.getLogger(__name__)

OperationFactory = Callable[[Order, List[Check], datetime, Optional[str]], Operation]

INTEGRATABLE_CHECK_STATUSES = (CheckStatus.PENDING, CheckStatus.APPROVED)


class OrderService(LifecycleService):
    entity = "order"

    def __init__(
        self,
        db,
        scheduler: Optional[IntegrationScheduler] = None,
        clock=None,
        operation_factory: OperationFactory = build_operation_from_order,
    ):
        super().__init__(db, clock)
        self.scheduler = scheduler
        self.operation_factory = operation_factory
        self.orders = OrderRepository(db)
        self.clients = ClientRepository(db)
        self.checks = CheckRepository(db)
        self.operations = OperationRepository(db)

    def get(self, number: int) -> Order:
        order = self.orders.get(number)
        if order is None:
            raise NotFoundError(f"Ordem {number} não encontrada")
        return order

    def list(
        self,
        status: Optional[OrderStatus] = None,
        client_code: Optional[int] = None,
        origin: Optional[OrderOrigin] = None,
        limit: int = 50,
    ) -> List[Order]:
        return self.orders.find(status=status, client_code=client_code, origin=origin, limit=limit)

    def checks_for(self, number: int) -> List[Check]:
        self.get(number)
        return self.checks.for_order(number)

    def create(self, order: Order, actor: Optional[str] = None) -> Order:
        """Register a pending order; the client name is snapshotted from the registry"""
        with unit_of_work(self.db):
            if self.orders.get(order.number) is not None:
                raise DuplicateKeyError(f"Ordem {order.number} já existe")
            if order.client is None or order.client.code is None:
                raise ValidationFailedError("Ordem inválida", ["Cliente não informado"])
            client = self.clients.get(order.client.code)
            if client is None:
                raise NotFoundError(f"Cliente {order.client.code} não encontrado")

            order.client = ClientRef(code=client.code, name=order.client.name or client.name)
            order.status = OrderStatus.PENDING
            order.created_at = self.now()
            order.actor = self.actor_or_default(actor)
            created = self.orders.create(order)
        self.transitioned(created.number, None, created.status, order.actor)
        return created

    def update(self, number: int, patch: OrderPatch) -> Order:
        with unit_of_work(self.db):
            order = self.get(number)
            rules.ensure_editable(order)
            current = order.status
            patch.apply_to(order)
            order.updated_at = self.now()
            self.ensure_applied(self.orders.update_if_status(order, [current]), number)
        return order

    def validate_for_integration(self, number: int) -> ValidationResult:
        order = self.get(number)
        return rules.validate_order_for_integration(order, self.checks.for_order(number))

    def integrate(self, number: int, actor: Optional[str] = None) -> Tuple[Order, ValidationResult]:
        """
        Start integration: validate, move to EM_PROCESSAMENTO, schedule completion.

        Returns as soon as the processing status is committed; the terminal
        status is applied later by the integration worker.
        """
        actor = self.actor_or_default(actor)
        with unit_of_work(self.db):
            order = self.get(number)
            current = order.status
            try:
                result = rules.begin_integration(order, self.checks.for_order(number))
            except ValidationFailedError:
                record_validation_failure(self.entity)
                raise
            order.updated_at = self.now()
            self.ensure_applied(self.orders.update_if_status(order, [current]), number)

        self.transitioned(number, current, order.status, actor)
        if self.scheduler is not None:
            self.scheduler.schedule(
                IntegrationRequested(entity=ORDER, key=str(number), requested_at=self.now(), actor=actor)
            )
        else:
            logger.warning("No integration scheduler configured", extra={"order": number})
        return order, result

    def complete_integration(self, number: int, requested_at: Optional[datetime] = None) -> Order:
        """
        Finalize a processing order.

        The order's terminal transition, the new operation and the attached
        checks moving to INTEGRADO are committed together, so an INTEGRADA
        order always has its operation. On failure everything is rolled back
        and the order goes to ERRO instead.
        """
        order = self.get(number)
        if order.status != OrderStatus.PROCESSING:
            return self._skipped(order)

        now = self.now()
        try:
            with unit_of_work(self.db):
                checks = self.checks.for_order(number)
                operation = self.operation_factory(order, checks, now, order.actor)
                rules.complete_integration(order, operation.number, now)
                order.updated_at = now
                if not self.orders.update_if_status(order, [OrderStatus.PROCESSING]):
                    raise _Superseded()
                self.operations.create(operation)
                self._integrate_checks(checks)
        except _Superseded:
            return self._skipped(self.get(number))
        except (DomainException, SQLAlchemyError) as e:
            logger.exception("Order integration failed", extra={"order": number})
            return self._fail_integration(number, str(e), requested_at)

        self.transitioned(number, OrderStatus.PROCESSING, order.status, order.actor)
        record_integration(self.entity, "integrated", latency_seconds(requested_at, now))
        log_integration(self.entity, number, "integrated", f"operação {operation.number}")
        return order

    def cancel(self, number: int, actor: Optional[str] = None) -> Order:
        with unit_of_work(self.db):
            order = self.get(number)
            current = order.status
            rules.cancel_order(order)
            order.updated_at = self.now()
            self.ensure_applied(self.orders.update_if_status(order, [current]), number)
        self.transitioned(number, current, order.status, self.actor_or_default(actor))
        return order

    def _integrate_checks(self, checks: List[Check]) -> None:
        for check in rules.live_checks(checks):
            if check.status not in INTEGRATABLE_CHECK_STATUSES:
                continue
            previous = check.status
            check.status = CheckStatus.INTEGRATED
            if not self.checks.update_if_status(check, [previous]):
                raise IntegrationFailureError(
                    f"Cheque {check.number} alterado durante a integração"
                )

    def _fail_integration(self, number: int, detail: str, requested_at: Optional[datetime]) -> Order:
        with unit_of_work(self.db):
            order = self.get(number)
            if order.status != OrderStatus.PROCESSING:
                return self._skipped(order)
            rules.fail_integration(order)
            order.updated_at = self.now()
            applied = self.orders.update_if_status(order, [OrderStatus.PROCESSING])
        if not applied:
            return self._skipped(self.get(number))

        self.transitioned(number, OrderStatus.PROCESSING, order.status, order.actor)
        record_integration(self.entity, "error", latency_seconds(requested_at, self.now()))
        log_integration(self.entity, number, "error", detail)
        return order

    def _skipped(self, order: Order) -> Order:
        record_integration(self.entity, "skipped")
        log_integration(self.entity, order.number, "skipped", f"status {order.status.value}")
        return order


class _Superseded(Exception):
    """The order left EM_PROCESSAMENTO before its completion was written"""
