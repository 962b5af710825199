"""Unit tests for operation invariants and transitions"""

import re
from datetime import date, datetime

import pytest

from discount_gateway.domain.enums import (
    CheckStatus,
    CreditLineRole,
    LogAction,
    OperationStatus,
    OperationType,
    PersonType,
)
from discount_gateway.domain.exceptions import InvalidStateError, ValidationFailedError
from discount_gateway.domain.models import (
    Capital,
    Check,
    CheckValidations,
    Client,
    ClientRef,
    CodeName,
    CreditLine,
    Operation,
    Order,
    OrderExpenses,
    Party,
    Rate,
    Term,
)
from discount_gateway.domain.operations import (
    SYSTEM_ACTOR,
    approve_operation,
    begin_integration,
    build_operation_from_order,
    calculate_effective_rate,
    complete_integration,
    fail_integration,
    generate_operation_number,
    recompute_derived,
    reject_operation,
    validate_against_client,
    validate_limits,
)

NOW = datetime(2024, 3, 15, 10, 0, 0)


def _operation(**overrides) -> Operation:
    fields = dict(
        id="op-1",
        number="OP1",
        order_number=10,
        client_code=1,
        capital=Capital(principal=10_000.0, expenses=200.0),
        rate=Rate(nominal=36.0),
        term=Term(days=30),
    )
    fields.update(overrides)
    operation = Operation(**fields)
    recompute_derived(operation)
    return operation


def _check(number: str, amount: float, due: date, status=CheckStatus.APPROVED, document_valid=True) -> Check:
    return Check(
        id=f"id-{number}",
        number=number,
        bank_code="001",
        amount=amount,
        order_number=10,
        client_code=1,
        drawer=Party(name="X", document="x", person_type=PersonType.INDIVIDUAL),
        due_date=due,
        status=status,
        validations=CheckValidations(document_valid=document_valid),
    )


def test_capital_total_and_interest_on_save():
    operation = _operation()
    assert operation.capital.total == 10_200.0
    assert operation.interest.value == pytest.approx(295.89, abs=0.01)
    assert operation.interest.computed is True


def test_interest_untouched_without_term():
    operation = _operation(term=Term(days=None))
    assert operation.interest.value is None
    assert operation.interest.computed is False


def test_effective_rate_requires_principal_and_days():
    assert calculate_effective_rate(_operation(term=Term(days=0))) == 0.0
    assert calculate_effective_rate(_operation(capital=Capital(principal=0.0))) == 0.0
    assert calculate_effective_rate(_operation(term=Term(days=365))) == pytest.approx(36.0)


def test_limit_exceeded_blocks_approval():
    operation = _operation(capital=Capital(principal=15_000.0, expenses=0.0))

    assert validate_limits(operation, 10_000.0) is False
    assert operation.validations.limit_exceeded is True
    assert "Limite máximo excedido: 10000.0" in operation.messages

    with pytest.raises(ValidationFailedError):
        approve_operation(operation, "analista", NOW)
    assert operation.status == OperationStatus.PENDING


def test_within_limit():
    operation = _operation()
    assert validate_limits(operation, 20_000.0) is True
    assert operation.validations.limit_exceeded is False
    assert operation.messages == []


def test_approve_writes_audit_entry():
    operation = _operation()
    approve_operation(operation, "analista", NOW)
    assert operation.status == OperationStatus.APPROVED
    assert operation.log[-1].action == LogAction.APPROVED
    assert operation.log[-1].actor == "analista"


def test_approve_requires_pending():
    with pytest.raises(InvalidStateError):
        approve_operation(_operation(status=OperationStatus.APPROVED), None, NOW)


def test_reject():
    operation = _operation()
    reject_operation(operation, "Documentação incompleta", None, NOW)
    assert operation.status == OperationStatus.REJECTED
    assert operation.messages == ["Rejeitada: Documentação incompleta"]
    assert operation.log[-1].action == LogAction.REJECTED
    assert operation.log[-1].actor == SYSTEM_ACTOR


def test_reject_refused_once_integrated():
    with pytest.raises(InvalidStateError):
        reject_operation(_operation(status=OperationStatus.INTEGRATED), "x", None, NOW)


def test_reject_requires_reason():
    with pytest.raises(ValidationFailedError):
        reject_operation(_operation(), "", None, NOW)


def test_integration_lifecycle():
    operation = _operation(status=OperationStatus.APPROVED)
    begin_integration(operation, "analista", NOW)
    assert operation.status == OperationStatus.PROCESSING

    complete_integration(operation, NOW)
    assert operation.status == OperationStatus.INTEGRATED
    assert operation.integrated_at == NOW
    assert [e.action for e in operation.log] == [LogAction.PROCESSING, LogAction.INTEGRATED]
    assert operation.log[-1].actor == SYSTEM_ACTOR


def test_integration_requires_approval():
    with pytest.raises(InvalidStateError):
        begin_integration(_operation(), None, NOW)


def test_failed_integration():
    operation = _operation(status=OperationStatus.PROCESSING)
    fail_integration(operation, "timeout", NOW)
    assert operation.status == OperationStatus.ERROR
    assert operation.messages == ["Erro na integração"]
    assert operation.log[-1].detail == "timeout"


def test_operation_number_format():
    number = generate_operation_number(NOW)
    assert re.fullmatch(r"OP20240315100000[0-9A-F]{6}", number)


def test_client_validation_flags():
    client = Client(
        code=1,
        name="Cliente",
        person_type=PersonType.INDIVIDUAL,
        document="529.982.247-25",
        credit_lines={CreditLineRole.ENDORSER: CreditLine(ceiling=5_000.0, utilized=0.0)},
    )
    operation = _operation()
    result = validate_against_client(
        operation, client, [_check("A1", 100.0, date(2024, 4, 1), document_valid=False)]
    )

    assert result.valid is False
    assert operation.validations.client_valid is True
    assert operation.validations.credit_line_sufficient is False
    assert operation.validations.documents_valid is False
    assert "Cheque A1 com documento inválido" in result.reasons


def test_build_operation_from_order():
    order = Order(
        number=10,
        client=ClientRef(code=1, name="Cliente"),
        rate=3.5,
        expenses=OrderExpenses(total=150.0),
        affected_line=CreditLineRole.DRAWER,
        credit_account=CodeName(code="998877"),
    )
    checks = [
        _check("A1", 1_000.0, date(2024, 4, 14)),
        _check("A2", 500.0, date(2024, 5, 14), status=CheckStatus.PENDING),
        _check("A3", 9_999.0, date(2024, 12, 31), status=CheckStatus.CANCELED),
    ]

    operation = build_operation_from_order(order, checks, NOW, "operador")

    assert operation.type == OperationType.DISCOUNT_CHECK
    assert operation.capital.principal == 1_500.0
    assert operation.capital.total == 1_650.0
    assert operation.rate.nominal == 3.5
    assert operation.term.start_date == date(2024, 3, 15)
    assert operation.term.due_date == date(2024, 5, 14)
    assert operation.term.days == 60
    assert operation.affected_line == CreditLineRole.DRAWER
    assert operation.credit_account.number == "998877"
    assert operation.check_ids == ["id-A1", "id-A2"]
    assert operation.log[0].action == LogAction.CREATED


def test_order_without_checks_becomes_account_credit():
    order = Order(number=11, client=ClientRef(code=1), rate=2.0, expenses=OrderExpenses(total=10.0))
    operation = build_operation_from_order(order, [], NOW)
    assert operation.type == OperationType.ACCOUNT_CREDIT
    assert operation.capital.principal == 0
    assert operation.term.days is None
