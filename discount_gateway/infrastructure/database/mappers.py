"""Conversion between ORM records and domain dataclasses.

Nested blocks are stored as JSON; enums are stored by value and timestamps
inside JSON as ISO-8601 strings.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Optional

from discount_gateway.domain.enums import (
    CheckStatus,
    ClientStatus,
    CreditLineRole,
    LogAction,
    OperationStatus,
    OperationType,
    OrderOrigin,
    OrderStatus,
    PersonType,
    Sector,
)
from discount_gateway.domain.models import (
    BankAccount,
    Capital,
    Check,
    CheckValidations,
    Client,
    ClientRef,
    CodeName,
    CreditLine,
    Insurance,
    Interest,
    LogEntry,
    Operation,
    OperationLink,
    OperationValidations,
    Order,
    OrderExpenses,
    Party,
    Rate,
    Term,
)
from discount_gateway.infrastructure.database.models import (
    CheckRecord,
    ClientRecord,
    OperationRecord,
    OrderRecord,
)


def _plain(obj: Any) -> Optional[Dict[str, Any]]:
    return asdict(obj) if obj is not None else None


def _code_name(data: Optional[Dict[str, Any]]) -> Optional[CodeName]:
    return CodeName(**data) if data else None


def _bank_account(data: Optional[Dict[str, Any]]) -> Optional[BankAccount]:
    return BankAccount(**data) if data else None


def _party_to_json(party: Optional[Party]) -> Optional[Dict[str, Any]]:
    if party is None:
        return None
    return {
        "name": party.name,
        "document": party.document,
        "person_type": party.person_type.value if party.person_type else None,
    }


def _party(data: Optional[Dict[str, Any]]) -> Optional[Party]:
    if data is None:
        return None
    person_type = data.get("person_type")
    return Party(
        name=data.get("name"),
        document=data.get("document"),
        person_type=PersonType(person_type) if person_type else None,
    )


# Client


def client_values(client: Client) -> Dict[str, Any]:
    return {
        "code": client.code,
        "name": client.name,
        "person_type": client.person_type.value,
        "document": client.document,
        "branch": _plain(client.branch),
        "application": _plain(client.application),
        "activity": _plain(client.activity),
        "credit_lines": {
            role.value: {"ceiling": line.ceiling, "utilized": line.utilized}
            for role, line in client.credit_lines.items()
        },
        "bank_account": _plain(client.bank_account),
        "insurance_enabled": client.insurance_enabled,
        "insurer": client.insurer,
        "status": client.status.value,
        "restrictions": list(client.restrictions),
        "updated_at": client.updated_at,
    }


def client_from_record(row: ClientRecord) -> Client:
    return Client(
        code=row.code,
        name=row.name,
        person_type=PersonType(row.person_type),
        document=row.document,
        branch=_code_name(row.branch) or CodeName(),
        application=_code_name(row.application) or CodeName(),
        activity=_code_name(row.activity),
        credit_lines={
            CreditLineRole(role): CreditLine(
                ceiling=line.get("ceiling") or 0.0, utilized=line.get("utilized") or 0.0
            )
            for role, line in (row.credit_lines or {}).items()
        },
        bank_account=_bank_account(row.bank_account),
        insurance_enabled=bool(row.insurance_enabled),
        insurer=row.insurer,
        status=ClientStatus(row.status),
        restrictions=list(row.restrictions or []),
        registered_at=row.registered_at,
        updated_at=row.updated_at,
    )


# Order


def order_values(order: Order) -> Dict[str, Any]:
    return {
        "number": order.number,
        "client_code": order.client.code if order.client else None,
        "client_name": order.client.name if order.client else None,
        "rate": order.rate,
        "expenses": _plain(order.expenses),
        "sector": order.sector.value,
        "affected_line": order.affected_line.value,
        "origin": order.origin.value,
        "branch": _plain(order.branch),
        "application": _plain(order.application),
        "activity": _plain(order.activity),
        "charge_insurance": order.charge_insurance,
        "insurer": order.insurer,
        "credit_account": _plain(order.credit_account),
        "status": order.status.value,
        "messages": list(order.messages),
        "operation_number": order.operation.number if order.operation else None,
        "operation_integrated_at": order.operation.integrated_at if order.operation else None,
        "updated_at": order.updated_at,
        "integrated_at": order.integrated_at,
        "actor": order.actor,
    }


def order_from_record(row: OrderRecord) -> Order:
    client = None
    if row.client_code is not None:
        client = ClientRef(code=row.client_code, name=row.client_name)

    operation = None
    if row.operation_number:
        operation = OperationLink(
            number=row.operation_number, integrated_at=row.operation_integrated_at
        )

    return Order(
        number=row.number,
        client=client,
        rate=row.rate,
        expenses=OrderExpenses(**(row.expenses or {})),
        sector=Sector(row.sector),
        affected_line=CreditLineRole(row.affected_line),
        origin=OrderOrigin(row.origin),
        branch=_code_name(row.branch),
        application=_code_name(row.application),
        activity=_code_name(row.activity),
        charge_insurance=bool(row.charge_insurance),
        insurer=row.insurer,
        credit_account=_code_name(row.credit_account),
        status=OrderStatus(row.status),
        messages=list(row.messages or []),
        operation=operation,
        created_at=row.created_at,
        updated_at=row.updated_at,
        integrated_at=row.integrated_at,
        actor=row.actor,
    )


# Check


def check_values(check: Check) -> Dict[str, Any]:
    return {
        "id": check.id,
        "number": check.number,
        "bank_code": check.bank_code,
        "bank_name": check.bank_name,
        "agency": check.agency,
        "account": check.account,
        "amount": check.amount,
        "issue_date": check.issue_date,
        "due_date": check.due_date,
        "drawer": _party_to_json(check.drawer),
        "endorser": _party_to_json(check.endorser),
        "order_number": check.order_number,
        "client_code": check.client_code,
        "status": check.status.value,
        "validations": asdict(check.validations),
        "messages": list(check.messages),
        "processed_at": check.processed_at,
        "actor": check.actor,
    }


def check_from_record(row: CheckRecord) -> Check:
    return Check(
        id=row.id,
        number=row.number,
        bank_code=row.bank_code,
        bank_name=row.bank_name,
        agency=row.agency,
        account=row.account,
        amount=row.amount,
        issue_date=row.issue_date,
        due_date=row.due_date,
        drawer=_party(row.drawer) or Party(),
        endorser=_party(row.endorser),
        order_number=row.order_number,
        client_code=row.client_code,
        status=CheckStatus(row.status),
        validations=CheckValidations(**(row.validations or {})),
        messages=list(row.messages or []),
        created_at=row.created_at,
        processed_at=row.processed_at,
        actor=row.actor,
    )


# Operation


def _log_to_json(entry: LogEntry) -> Dict[str, Any]:
    return {
        "action": entry.action.value,
        "actor": entry.actor,
        "timestamp": entry.timestamp.isoformat(),
        "detail": entry.detail,
    }


def _log_entry(data: Dict[str, Any]) -> LogEntry:
    return LogEntry(
        action=LogAction(data["action"]),
        actor=data["actor"],
        timestamp=datetime.fromisoformat(data["timestamp"]),
        detail=data.get("detail"),
    )


def operation_values(operation: Operation) -> Dict[str, Any]:
    return {
        "id": operation.id,
        "number": operation.number,
        "order_number": operation.order_number,
        "client_code": operation.client_code,
        "type": operation.type.value,
        "principal": operation.capital.principal,
        "expenses": operation.capital.expenses,
        "capital_total": operation.capital.total,
        "nominal_rate": operation.rate.nominal,
        "effective_rate": operation.rate.effective,
        "term_days": operation.term.days,
        "start_date": operation.term.start_date,
        "due_date": operation.term.due_date,
        "interest_value": operation.interest.value,
        "interest_computed": operation.interest.computed,
        "insurance": _plain(operation.insurance),
        "affected_line": operation.affected_line.value,
        "credit_account": _plain(operation.credit_account),
        "check_ids": list(operation.check_ids),
        "status": operation.status.value,
        "validations": asdict(operation.validations),
        "messages": list(operation.messages),
        "log": [_log_to_json(entry) for entry in operation.log],
        "integrated_at": operation.integrated_at,
        "actor": operation.actor,
    }


def operation_from_record(row: OperationRecord) -> Operation:
    return Operation(
        id=row.id,
        number=row.number,
        order_number=row.order_number,
        client_code=row.client_code,
        type=OperationType(row.type),
        capital=Capital(principal=row.principal, expenses=row.expenses, total=row.capital_total),
        rate=Rate(nominal=row.nominal_rate, effective=row.effective_rate),
        term=Term(days=row.term_days, start_date=row.start_date, due_date=row.due_date),
        interest=Interest(value=row.interest_value, computed=bool(row.interest_computed)),
        insurance=Insurance(**row.insurance) if row.insurance else None,
        affected_line=CreditLineRole(row.affected_line),
        credit_account=_bank_account(row.credit_account),
        check_ids=list(row.check_ids or []),
        status=OperationStatus(row.status),
        validations=OperationValidations(**(row.validations or {})),
        messages=list(row.messages or []),
        log=[_log_entry(entry) for entry in (row.log or [])],
        created_at=row.created_at,
        integrated_at=row.integrated_at,
        actor=row.actor,
    )
