"""Check lifecycle service - persistence around the check state machine"""

import copy
import uuid
from typing import List, Optional

from discount_gateway.domain import checks as rules
from discount_gateway.domain.enums import CheckStatus
from discount_gateway.domain.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.domain.models import Check, CheckValidations
from discount_gateway.domain.patches import CheckPatch
from discount_gateway.infrastructure.database.repositories import (
    CheckRepository,
    ClientRepository,
    OrderRepository,
)
from discount_gateway.infrastructure.observability.metrics import record_validation_failure
from discount_gateway.services.base import LifecycleService, unit_of_work


class CheckService(LifecycleService):
    entity = "check"

    def __init__(self, db, clock=None):
        super().__init__(db, clock)
        self.checks = CheckRepository(db)
        self.orders = OrderRepository(db)
        self.clients = ClientRepository(db)

    def get(self, check_id: str) -> Check:
        check = self.checks.get(check_id)
        if check is None:
            raise NotFoundError(f"Cheque {check_id} não encontrado")
        return check

    def list(
        self,
        status: Optional[CheckStatus] = None,
        order_number: Optional[int] = None,
        client_code: Optional[int] = None,
        limit: int = 100,
    ) -> List[Check]:
        return self.checks.find(status=status, order_number=order_number, client_code=client_code, limit=limit)

    def create(self, check: Check, actor: Optional[str] = None) -> Check:
        """Register a pending check against an existing order and client"""
        with unit_of_work(self.db):
            if self.orders.get(check.order_number) is None:
                raise NotFoundError(f"Ordem {check.order_number} não encontrada")
            if self.clients.get(check.client_code) is None:
                raise NotFoundError(f"Cliente {check.client_code} não encontrado")
            if self.checks.get_by_number(check.number, check.bank_code) is not None:
                raise DuplicateKeyError(f"Cheque {check.number} do banco {check.bank_code} já existe")

            check.id = check.id or str(uuid.uuid4())
            check.status = CheckStatus.PENDING
            check.created_at = self.now()
            check.actor = self.actor_or_default(actor)
            created = self.checks.create(check)
        self.transitioned(created.id, None, created.status, check.actor)
        return created

    def update(self, check_id: str, patch: CheckPatch) -> Check:
        with unit_of_work(self.db):
            check = self.get(check_id)
            rules.ensure_editable(check)
            current = check.status
            patch.apply_to(check)
            self.ensure_applied(self.checks.update_if_status(check, [current]), check_id)
        return check

    def validate(self, check_id: str) -> CheckValidations:
        """
        Recompute and persist the validations record.

        Integrated checks are locked: the result is computed on a copy and
        nothing is written.
        """
        check = self.get(check_id)
        if check.status == CheckStatus.INTEGRATED:
            return rules.validate_check(copy.deepcopy(check), self.now())

        with unit_of_work(self.db):
            validations = rules.validate_check(check, self.now())
            self.ensure_applied(self.checks.update_if_status(check, [check.status]), check_id)
        return validations

    def approve(self, check_id: str, actor: Optional[str] = None) -> Check:
        """Re-validate, then approve when document, due date and amount hold"""
        check = self.get(check_id)
        current = check.status
        now = self.now()

        if current == CheckStatus.PENDING:
            rules.validate_check(check, now)
        try:
            rules.approve_check(check, now)
        except ValidationFailedError:
            record_validation_failure(self.entity)
            # Keep the fresh validations visible to the caller
            with unit_of_work(self.db):
                self.ensure_applied(self.checks.update_if_status(check, [current]), check_id)
            raise

        with unit_of_work(self.db):
            self.ensure_applied(self.checks.update_if_status(check, [current]), check_id)
        self.transitioned(check_id, current, check.status, self.actor_or_default(actor))
        return check

    def reject(self, check_id: str, reason: str, actor: Optional[str] = None) -> Check:
        with unit_of_work(self.db):
            check = self.get(check_id)
            current = check.status
            rules.reject_check(check, reason, self.now())
            self.ensure_applied(self.checks.update_if_status(check, [current]), check_id)
        self.transitioned(check_id, current, check.status, self.actor_or_default(actor))
        return check

    def cancel(self, check_id: str, actor: Optional[str] = None) -> Check:
        with unit_of_work(self.db):
            check = self.get(check_id)
            current = check.status
            rules.cancel_check(check)
            self.ensure_applied(self.checks.update_if_status(check, [current]), check_id)
        self.transitioned(check_id, current, check.status, self.actor_or_default(actor))
        return check
