"""Order lifecycle - integration validation and status transitions"""

from datetime import datetime
from typing import Iterable

from discount_gateway.domain.enums import CheckStatus, OrderStatus
from discount_gateway.domain.exceptions import InvalidStateError, ValidationFailedError
from discount_gateway.domain.models import Check, OperationLink, Order, ValidationResult

INTEGRABLE_FROM = (OrderStatus.PENDING, OrderStatus.ERROR)
CANCELABLE_FROM = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.ERROR,
    OrderStatus.CANCELED,
)
LOCKED_FOR_EDIT = (OrderStatus.INTEGRATED, OrderStatus.CANCELED, OrderStatus.PROCESSING)

INTEGRATION_ERROR_MESSAGE = "Erro na integração"


def recompute_expenses(order: Order) -> None:
    """Expense total follows the two sub-totals whenever either is present"""
    expenses = order.expenses
    if expenses.operation1 is not None or expenses.operation2 is not None:
        expenses.total = (expenses.operation1 or 0.0) + (expenses.operation2 or 0.0)


def live_checks(checks: Iterable[Check]) -> list:
    """Checks that still count towards the operation (canceled ones do not)"""
    return [c for c in checks if c.status != CheckStatus.CANCELED]


def validate_order_for_integration(order: Order, checks: Iterable[Check]) -> ValidationResult:
    """
    Decide whether an order may be integrated.

    Accumulates every failing rule instead of stopping at the first one.
    Reads the stored document validity of every attached check, canceled
    ones included. The order itself is not modified.
    """
    result = ValidationResult()

    if order.client is None or order.client.code is None:
        result.fail("Cliente não informado")

    if order.rate is None or order.rate <= 0 or order.rate > 100:
        result.fail("Taxa inválida")

    if order.expenses.total is None or order.expenses.total <= 0:
        result.fail("Gastos devem ser maiores que zero")

    for check in checks:
        if not check.validations.document_valid:
            result.fail(f"Cheque {check.number} com documento inválido")

    return result


def ensure_editable(order: Order) -> None:
    if order.status in LOCKED_FOR_EDIT:
        raise InvalidStateError(
            f"Ordem com status {order.status.value} não pode ser editada"
        )


def begin_integration(order: Order, checks: Iterable[Check]) -> ValidationResult:
    """Validate and move the order into processing; completion happens later"""
    if order.status == OrderStatus.INTEGRATED:
        raise InvalidStateError("Ordem já integrada")
    if order.status not in INTEGRABLE_FROM:
        raise InvalidStateError(
            f"Ordem com status {order.status.value} não pode ser integrada"
        )

    result = validate_order_for_integration(order, checks)
    if not result.valid:
        raise ValidationFailedError("Ordem não pode ser integrada", result.reasons)

    order.status = OrderStatus.PROCESSING
    return result


def complete_integration(order: Order, operation_number: str, now: datetime) -> None:
    if order.status != OrderStatus.PROCESSING:
        raise InvalidStateError(
            f"Ordem com status {order.status.value} não está em processamento"
        )
    order.status = OrderStatus.INTEGRATED
    order.integrated_at = now
    order.operation = OperationLink(number=operation_number, integrated_at=now)


def fail_integration(order: Order) -> None:
    if order.status != OrderStatus.PROCESSING:
        raise InvalidStateError(
            f"Ordem com status {order.status.value} não está em processamento"
        )
    order.status = OrderStatus.ERROR
    order.messages.append(INTEGRATION_ERROR_MESSAGE)


def cancel_order(order: Order) -> None:
    if order.status == OrderStatus.INTEGRATED:
        raise InvalidStateError("Ordem integrada não pode ser cancelada")
    order.status = OrderStatus.CANCELED
