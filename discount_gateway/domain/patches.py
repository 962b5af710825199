"""Whitelisted update payloads.

Each patch only carries the fields an administrator may change; unknown or
protected fields (status, numbers, links, audit data) are rejected at parse
time. `apply_to` copies the explicitly set fields onto the entity; the save
path then re-runs the entity's invariants.
"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from discount_gateway.domain.enums import (
    CreditLineRole,
    OperationType,
    OrderOrigin,
    PersonType,
    Sector,
)
from discount_gateway.domain.models import (
    BankAccount,
    Check,
    Client,
    CodeName,
    CreditLine,
    Insurance,
    Operation,
    Order,
    Party,
)


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CodeNameIn(StrictModel):
    code: Optional[str] = None
    name: Optional[str] = None

    def to_domain(self) -> CodeName:
        return CodeName(code=self.code, name=self.name)


class CreditLineIn(StrictModel):
    ceiling: float = Field(0.0, ge=0)
    utilized: float = Field(0.0, ge=0)

    def to_domain(self) -> CreditLine:
        return CreditLine(ceiling=self.ceiling, utilized=self.utilized)


class BankAccountIn(StrictModel):
    number: Optional[str] = None
    bank: Optional[str] = None
    agency: Optional[str] = None

    def to_domain(self) -> BankAccount:
        return BankAccount(number=self.number, bank=self.bank, agency=self.agency)


class PartyIn(StrictModel):
    name: Optional[str] = None
    document: Optional[str] = None
    person_type: Optional[PersonType] = None

    def to_domain(self) -> Party:
        return Party(name=self.name, document=self.document, person_type=self.person_type)


class InsuranceIn(StrictModel):
    charge: bool = False
    insurer: Optional[str] = None
    value: Optional[float] = Field(None, ge=0)

    def to_domain(self) -> Insurance:
        return Insurance(charge=self.charge, insurer=self.insurer, value=self.value)


class ClientPatch(StrictModel):
    name: Optional[str] = Field(None, min_length=2)
    document: Optional[str] = Field(None, min_length=11, max_length=18)
    person_type: Optional[PersonType] = None
    branch: Optional[CodeNameIn] = None
    application: Optional[CodeNameIn] = None
    credit_lines: Optional[Dict[CreditLineRole, CreditLineIn]] = None
    bank_account: Optional[BankAccountIn] = None
    insurance_enabled: Optional[bool] = None
    insurer: Optional[str] = None
    restrictions: Optional[List[str]] = None

    def apply_to(self, client: Client) -> None:
        changes = self.model_dump(exclude_unset=True)
        for name in ("name", "document", "person_type", "insurance_enabled", "insurer"):
            if name in changes:
                setattr(client, name, getattr(self, name))
        if "branch" in changes and self.branch is not None:
            client.branch = self.branch.to_domain()
        if "application" in changes and self.application is not None:
            client.application = self.application.to_domain()
        if "credit_lines" in changes and self.credit_lines is not None:
            for role, line in self.credit_lines.items():
                client.credit_lines[role] = line.to_domain()
        if "bank_account" in changes:
            client.bank_account = self.bank_account.to_domain() if self.bank_account else None
        if "restrictions" in changes:
            client.restrictions = list(self.restrictions or [])


class OrderPatch(StrictModel):
    client_name: Optional[str] = None
    rate: Optional[float] = Field(None, ge=0, le=100)
    expenses_total: Optional[float] = Field(None, ge=0)
    expenses_operation1: Optional[float] = Field(None, ge=0)
    expenses_operation2: Optional[float] = Field(None, ge=0)
    sector: Optional[Sector] = None
    affected_line: Optional[CreditLineRole] = None
    origin: Optional[OrderOrigin] = None
    branch: Optional[CodeNameIn] = None
    application: Optional[CodeNameIn] = None
    activity: Optional[CodeNameIn] = None
    charge_insurance: Optional[bool] = None
    insurer: Optional[str] = None
    credit_account: Optional[CodeNameIn] = None

    def apply_to(self, order: Order) -> None:
        changes = self.model_dump(exclude_unset=True)
        if "client_name" in changes and order.client is not None:
            order.client.name = self.client_name
        for name in ("rate", "sector", "affected_line", "origin", "charge_insurance", "insurer"):
            if name in changes and getattr(self, name) is not None:
                setattr(order, name, getattr(self, name))
        if "expenses_total" in changes and self.expenses_total is not None:
            order.expenses.total = self.expenses_total
        if "expenses_operation1" in changes:
            order.expenses.operation1 = self.expenses_operation1
        if "expenses_operation2" in changes:
            order.expenses.operation2 = self.expenses_operation2
        for name in ("branch", "application", "activity", "credit_account"):
            if name in changes:
                value = getattr(self, name)
                setattr(order, name, value.to_domain() if value else None)


class CheckPatch(StrictModel):
    amount: Optional[float] = Field(None, ge=0)
    bank_name: Optional[str] = None
    agency: Optional[str] = None
    account: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    drawer: Optional[PartyIn] = None
    endorser: Optional[PartyIn] = None

    def apply_to(self, check: Check) -> None:
        changes = self.model_dump(exclude_unset=True)
        if "amount" in changes and self.amount is not None:
            check.amount = self.amount
        for name in ("bank_name", "agency", "account", "issue_date", "due_date"):
            if name in changes:
                setattr(check, name, getattr(self, name))
        if "drawer" in changes and self.drawer is not None:
            check.drawer = self.drawer.to_domain()
        if "endorser" in changes:
            check.endorser = self.endorser.to_domain() if self.endorser else None


class OperationPatch(StrictModel):
    type: Optional[OperationType] = None
    principal: Optional[float] = Field(None, ge=0)
    expenses: Optional[float] = Field(None, ge=0)
    nominal_rate: Optional[float] = Field(None, ge=0, le=100)
    days: Optional[int] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    insurance: Optional[InsuranceIn] = None
    affected_line: Optional[CreditLineRole] = None
    credit_account: Optional[BankAccountIn] = None
    check_ids: Optional[List[str]] = None

    def apply_to(self, operation: Operation) -> None:
        changes = self.model_dump(exclude_unset=True)
        if "type" in changes and self.type is not None:
            operation.type = self.type
        if "principal" in changes and self.principal is not None:
            operation.capital.principal = self.principal
        if "expenses" in changes and self.expenses is not None:
            operation.capital.expenses = self.expenses
        if "nominal_rate" in changes and self.nominal_rate is not None:
            operation.rate.nominal = self.nominal_rate
        if "days" in changes:
            operation.term.days = self.days
        if "start_date" in changes:
            operation.term.start_date = self.start_date
        if "due_date" in changes:
            operation.term.due_date = self.due_date
        if "insurance" in changes:
            operation.insurance = self.insurance.to_domain() if self.insurance else None
        if "affected_line" in changes and self.affected_line is not None:
            operation.affected_line = self.affected_line
        if "credit_account" in changes:
            operation.credit_account = (
                self.credit_account.to_domain() if self.credit_account else None
            )
        if "check_ids" in changes:
            operation.check_ids = list(self.check_ids or [])
