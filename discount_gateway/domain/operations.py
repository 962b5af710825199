"""Operation lifecycle - derived values, limit checks and status transitions"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from discount_gateway.domain.credit import validate_client
from discount_gateway.domain.enums import LogAction, OperationStatus, OperationType
from discount_gateway.domain.exceptions import InvalidStateError, ValidationFailedError
from discount_gateway.domain.finance import effective_rate, simple_interest, total_capital
from discount_gateway.domain.models import (
    BankAccount,
    Capital,
    Check,
    Client,
    Insurance,
    LogEntry,
    Operation,
    Order,
    Rate,
    Term,
    ValidationResult,
)
from discount_gateway.domain.orders import INTEGRATION_ERROR_MESSAGE, live_checks
from discount_gateway.utils.date_utils import days_between

SYSTEM_ACTOR = "SISTEMA"


def generate_operation_number(now: datetime) -> str:
    """OP + timestamp + random suffix, unique across concurrent integrations"""
    return f"OP{now:%Y%m%d%H%M%S}{uuid.uuid4().hex[:6].upper()}"


def recompute_derived(operation: Operation) -> None:
    """
    Save-time invariants.

    - capital.total = principal + expenses, always
    - interest is recomputed and flagged only when days, principal and nominal
      rate are all present; otherwise the previous value is left untouched
    """
    operation.capital.total = total_capital(operation.capital.principal, operation.capital.expenses)

    interest = simple_interest(
        operation.capital.principal, operation.rate.nominal, operation.term.days
    )
    if interest is not None:
        operation.interest.value = interest
        operation.interest.computed = True


def calculate_effective_rate(operation: Operation) -> float:
    """Effective annual rate for the operation's term; 0 without principal or term"""
    if not operation.term.days or not operation.capital.principal:
        return 0.0
    return effective_rate(operation.rate.nominal, operation.term.days)


def add_log(
    operation: Operation,
    action: LogAction,
    actor: Optional[str],
    detail: Optional[str],
    now: datetime,
) -> LogEntry:
    entry = LogEntry(action=action, actor=actor or SYSTEM_ACTOR, timestamp=now, detail=detail)
    operation.log.append(entry)
    return entry


def ensure_editable(operation: Operation) -> None:
    if operation.status == OperationStatus.INTEGRATED:
        raise InvalidStateError("Operação integrada não pode ser editada")


def validate_limits(operation: Operation, max_limit: float) -> bool:
    """Flag the operation when its capital total exceeds max_limit; True means within limit"""
    exceeded = operation.capital.total > max_limit
    operation.validations.limit_exceeded = exceeded
    if exceeded:
        operation.messages.append(f"Limite máximo excedido: {max_limit}")
    return not exceeded


def validate_against_client(
    operation: Operation, client: Client, checks: Iterable[Check]
) -> ValidationResult:
    """
    Record client eligibility, credit line capacity and referenced check
    documents on the operation's validations block.
    """
    result = ValidationResult()
    client_validation = validate_client(client)
    for reason in client_validation.reasons:
        result.fail(reason)

    capacity = client_validation.capacity[operation.affected_line]
    sufficient = capacity.available >= 0 and operation.capital.total <= capacity.available
    if not sufficient:
        result.fail(
            f"Linha de crédito {operation.affected_line.value} insuficiente: "
            f"disponível {capacity.available:.2f}"
        )

    documents_valid = True
    for check in checks:
        if not check.validations.document_valid:
            documents_valid = False
            result.fail(f"Cheque {check.number} com documento inválido")

    operation.validations.client_valid = client_validation.valid
    operation.validations.credit_line_sufficient = sufficient
    operation.validations.documents_valid = documents_valid
    return result


def approve_operation(operation: Operation, actor: Optional[str], now: datetime) -> None:
    if operation.status != OperationStatus.PENDING:
        raise InvalidStateError("Operação não está pendente para aprovação")
    if operation.validations.limit_exceeded:
        raise ValidationFailedError(
            "Operação não pode ser aprovada - limite excedido",
            [m for m in operation.messages if m.startswith("Limite")] or ["Limite excedido"],
        )

    operation.status = OperationStatus.APPROVED
    add_log(operation, LogAction.APPROVED, actor, "Operação aprovada pelo usuário", now)


def reject_operation(operation: Operation, reason: str, actor: Optional[str], now: datetime) -> None:
    if operation.status == OperationStatus.INTEGRATED:
        raise InvalidStateError("Operação integrada não pode ser rejeitada")
    if not reason or not reason.strip():
        raise ValidationFailedError("Motivo inválido", ["Motivo da rejeição é obrigatório"])

    operation.status = OperationStatus.REJECTED
    operation.messages.append(f"Rejeitada: {reason}")
    add_log(operation, LogAction.REJECTED, actor, f"Rejeitada: {reason}", now)


def begin_integration(operation: Operation, actor: Optional[str], now: datetime) -> None:
    if operation.status != OperationStatus.APPROVED:
        raise InvalidStateError("Operação deve estar aprovada para integração")
    operation.status = OperationStatus.PROCESSING
    add_log(operation, LogAction.PROCESSING, actor, "Integração iniciada", now)


def complete_integration(operation: Operation, now: datetime) -> None:
    if operation.status != OperationStatus.PROCESSING:
        raise InvalidStateError(
            f"Operação com status {operation.status.value} não está em processamento"
        )
    operation.status = OperationStatus.INTEGRATED
    operation.integrated_at = now
    add_log(operation, LogAction.INTEGRATED, SYSTEM_ACTOR, "Integração concluída com sucesso", now)


def fail_integration(operation: Operation, error: str, now: datetime) -> None:
    if operation.status != OperationStatus.PROCESSING:
        raise InvalidStateError(
            f"Operação com status {operation.status.value} não está em processamento"
        )
    operation.status = OperationStatus.ERROR
    operation.messages.append(INTEGRATION_ERROR_MESSAGE)
    add_log(operation, LogAction.ERROR, SYSTEM_ACTOR, error, now)


def build_operation_from_order(
    order: Order,
    checks: List[Check],
    now: datetime,
    actor: Optional[str] = None,
) -> Operation:
    """
    Materialize the contract produced by an order's integration.

    Principal is the sum of live attached check amounts; the term runs from
    the integration date to the latest check due date.
    """
    attached = live_checks(checks)
    due_dates = [c.due_date for c in attached if c.due_date is not None]
    due_date = max(due_dates) if due_dates else None
    start = now.date()

    operation = Operation(
        id=str(uuid.uuid4()),
        number=generate_operation_number(now),
        order_number=order.number,
        client_code=order.client.code,
        type=OperationType.DISCOUNT_CHECK if attached else OperationType.ACCOUNT_CREDIT,
        capital=Capital(
            principal=sum(c.amount for c in attached),
            expenses=order.expenses.total,
        ),
        rate=Rate(nominal=order.rate),
        term=Term(
            days=days_between(start, due_date) if due_date else None,
            start_date=start,
            due_date=due_date,
        ),
        insurance=Insurance(charge=order.charge_insurance, insurer=order.insurer),
        affected_line=order.affected_line,
        credit_account=(
            BankAccount(number=order.credit_account.code)
            if order.credit_account is not None
            else None
        ),
        check_ids=[c.id for c in attached],
        created_at=now,
        actor=actor or SYSTEM_ACTOR,
    )
    add_log(operation, LogAction.CREATED, actor, f"Criada pela integração da ordem {order.number}", now)
    recompute_derived(operation)
    return operation
