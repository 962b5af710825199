"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from discount_gateway.domain.enums import (
    ClientStatus,
    CreditLineRole,
    LogAction,
    OperationType,
    OrderOrigin,
    PersonType,
    Sector,
)
from discount_gateway.domain.models import (
    Capital,
    Check,
    Client,
    ClientRef,
    Operation,
    Order,
    OrderExpenses,
    Rate,
    Term,
)
from discount_gateway.domain.patches import (
    BankAccountIn,
    CodeNameIn,
    CreditLineIn,
    InsuranceIn,
    PartyIn,
    StrictModel,
)


class ActorRequest(BaseModel):
    """Optional actor for transitions that need no other input"""

    actor: Optional[str] = None


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, description="Rejection reason")
    actor: Optional[str] = None


class ClientCreate(StrictModel):
    """Request body for POST /v1/clients"""

    code: int = Field(..., gt=0)
    name: str = Field(..., min_length=2)
    person_type: PersonType
    document: str = Field(..., min_length=11, max_length=18)
    branch: CodeNameIn = Field(default_factory=CodeNameIn)
    application: CodeNameIn = Field(default_factory=CodeNameIn)
    credit_lines: Dict[CreditLineRole, CreditLineIn] = Field(default_factory=dict)
    bank_account: Optional[BankAccountIn] = None
    insurance_enabled: bool = False
    insurer: Optional[str] = None
    restrictions: List[str] = Field(default_factory=list)

    def to_domain(self) -> Client:
        return Client(
            code=self.code,
            name=self.name,
            person_type=self.person_type,
            document=self.document,
            branch=self.branch.to_domain(),
            application=self.application.to_domain(),
            credit_lines={role: line.to_domain() for role, line in self.credit_lines.items()},
            bank_account=self.bank_account.to_domain() if self.bank_account else None,
            insurance_enabled=self.insurance_enabled,
            insurer=self.insurer,
            restrictions=list(self.restrictions),
        )


class ClientStatusRequest(BaseModel):
    status: ClientStatus


class ActivityRequest(BaseModel):
    code: int = Field(..., gt=0, description="Activity code")
    description: str = Field(..., min_length=1)


class ClientRefIn(StrictModel):
    code: int = Field(..., gt=0)
    name: Optional[str] = None


class ExpensesIn(StrictModel):
    total: float = Field(0.0, ge=0)
    operation1: Optional[float] = Field(None, ge=0)
    operation2: Optional[float] = Field(None, ge=0)


class OrderCreate(StrictModel):
    """Request body for POST /v1/orders"""

    number: int = Field(..., gt=0)
    client: ClientRefIn
    rate: float = Field(..., ge=0, le=100, description="Nominal annual rate, percent")
    expenses: ExpensesIn = Field(default_factory=ExpensesIn)
    sector: Sector = Sector.PERSONAL
    affected_line: CreditLineRole = CreditLineRole.ENDORSER
    origin: OrderOrigin = OrderOrigin.FORM
    branch: Optional[CodeNameIn] = None
    application: Optional[CodeNameIn] = None
    activity: Optional[CodeNameIn] = None
    charge_insurance: bool = False
    insurer: Optional[str] = None
    credit_account: Optional[CodeNameIn] = None
    actor: Optional[str] = None

    def to_domain(self) -> Order:
        return Order(
            number=self.number,
            client=ClientRef(code=self.client.code, name=self.client.name),
            rate=self.rate,
            expenses=OrderExpenses(
                total=self.expenses.total,
                operation1=self.expenses.operation1,
                operation2=self.expenses.operation2,
            ),
            sector=self.sector,
            affected_line=self.affected_line,
            origin=self.origin,
            branch=self.branch.to_domain() if self.branch else None,
            application=self.application.to_domain() if self.application else None,
            activity=self.activity.to_domain() if self.activity else None,
            charge_insurance=self.charge_insurance,
            insurer=self.insurer,
            credit_account=self.credit_account.to_domain() if self.credit_account else None,
        )


class CheckCreate(StrictModel):
    """Request body for POST /v1/checks"""

    number: str = Field(..., min_length=1)
    bank_code: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    order_number: int
    client_code: int
    drawer: PartyIn
    bank_name: Optional[str] = None
    agency: Optional[str] = None
    account: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    endorser: Optional[PartyIn] = None
    actor: Optional[str] = None

    def to_domain(self) -> Check:
        return Check(
            id="",
            number=self.number,
            bank_code=self.bank_code,
            amount=self.amount,
            order_number=self.order_number,
            client_code=self.client_code,
            drawer=self.drawer.to_domain(),
            bank_name=self.bank_name,
            agency=self.agency,
            account=self.account,
            issue_date=self.issue_date,
            due_date=self.due_date,
            endorser=self.endorser.to_domain() if self.endorser else None,
        )


class OperationCreate(StrictModel):
    """Request body for POST /v1/operations"""

    order_number: int
    client_code: int
    type: OperationType = OperationType.DISCOUNT_CHECK
    principal: float = Field(..., ge=0)
    expenses: float = Field(0.0, ge=0)
    nominal_rate: float = Field(..., ge=0, le=100)
    days: Optional[int] = Field(None, ge=0)
    start_date: Optional[date] = None
    due_date: Optional[date] = None
    insurance: Optional[InsuranceIn] = None
    affected_line: CreditLineRole = CreditLineRole.ENDORSER
    credit_account: Optional[BankAccountIn] = None
    check_ids: List[str] = Field(default_factory=list)
    actor: Optional[str] = None

    def to_domain(self) -> Operation:
        return Operation(
            id="",
            number="",
            order_number=self.order_number,
            client_code=self.client_code,
            type=self.type,
            capital=Capital(principal=self.principal, expenses=self.expenses),
            rate=Rate(nominal=self.nominal_rate),
            term=Term(days=self.days, start_date=self.start_date, due_date=self.due_date),
            insurance=self.insurance.to_domain() if self.insurance else None,
            affected_line=self.affected_line,
            credit_account=self.credit_account.to_domain() if self.credit_account else None,
            check_ids=list(self.check_ids),
        )


class LimitRequest(BaseModel):
    max_limit: float = Field(..., gt=0)


class ApproveOperationRequest(BaseModel):
    actor: Optional[str] = None
    max_limit: Optional[float] = Field(None, gt=0)


class LogRequest(BaseModel):
    action: LogAction
    actor: Optional[str] = None
    detail: Optional[str] = None


class ValidationResponse(BaseModel):
    valid: bool
    reasons: List[str]


class OrderIntegrationResponse(BaseModel):
    """Response for POST /v1/orders/{number}/integrate; completion is asynchronous"""

    order: Order
    validation: ValidationResponse


class EffectiveRateResponse(BaseModel):
    nominal: float
    effective: float
    difference: float


class LimitResponse(BaseModel):
    within_limit: bool
    operation: Operation
