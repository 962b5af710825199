"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

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


@dataclass
class CodeName:
    """Generic (code, description) pair used for branch, activity and application"""

    code: Optional[str] = None
    name: Optional[str] = None


@dataclass
class CreditLine:
    """Authorized ceiling and currently utilized amount for one role"""

    ceiling: float = 0.0
    utilized: float = 0.0


@dataclass
class BankAccount:
    number: Optional[str] = None
    bank: Optional[str] = None
    agency: Optional[str] = None


@dataclass
class Client:
    """Registered credit client"""

    code: int
    name: str
    person_type: PersonType
    document: str
    branch: CodeName = field(default_factory=CodeName)
    application: CodeName = field(default_factory=CodeName)
    activity: Optional[CodeName] = None
    credit_lines: Dict[CreditLineRole, CreditLine] = field(default_factory=dict)
    bank_account: Optional[BankAccount] = None
    insurance_enabled: bool = False
    insurer: Optional[str] = None
    status: ClientStatus = ClientStatus.ACTIVE
    restrictions: List[str] = field(default_factory=list)
    registered_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class CreditCapacity:
    """Output of a credit line capacity check"""

    sufficient_capacity: bool
    available: float
    ceiling: float


@dataclass
class ClientValidation:
    """Overall client validity with accumulated reasons"""

    valid: bool
    reasons: List[str]
    capacity: Dict[CreditLineRole, CreditCapacity]
    has_bank_account: bool
    insurance_enabled: bool


@dataclass
class ValidationResult:
    valid: bool = True
    reasons: List[str] = field(default_factory=list)

    def fail(self, reason: str) -> None:
        self.valid = False
        self.reasons.append(reason)


@dataclass
class Party:
    """Drawer or endorser named on a check"""

    name: Optional[str] = None
    document: Optional[str] = None
    person_type: Optional[PersonType] = None


@dataclass
class CheckValidations:
    document_valid: bool = False
    due_date_valid: Optional[bool] = None
    amount_valid: Optional[bool] = None
    drawer_valid: Optional[bool] = None
    endorser_valid: Optional[bool] = None
    errors: List[str] = field(default_factory=list)


@dataclass
class Check:
    """Bank check attached to an order as discounting collateral"""

    id: str
    number: str
    bank_code: str
    amount: float
    order_number: int
    client_code: int
    drawer: Party
    bank_name: Optional[str] = None
    agency: Optional[str] = None
    account: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    endorser: Optional[Party] = None
    status: CheckStatus = CheckStatus.PENDING
    validations: CheckValidations = field(default_factory=CheckValidations)
    messages: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    actor: Optional[str] = None


@dataclass
class ClientRef:
    """Denormalized client snapshot owned by an order"""

    code: Optional[int]
    name: Optional[str] = None


@dataclass
class OrderExpenses:
    total: float = 0.0
    operation1: Optional[float] = None
    operation2: Optional[float] = None


@dataclass
class OperationLink:
    """Back-reference to the operation produced by an order's integration"""

    number: str
    integrated_at: datetime


@dataclass
class Order:
    """Request for discounted credit"""

    number: int
    client: Optional[ClientRef]
    rate: float
    expenses: OrderExpenses = field(default_factory=OrderExpenses)
    sector: Sector = Sector.PERSONAL
    affected_line: CreditLineRole = CreditLineRole.ENDORSER
    origin: OrderOrigin = OrderOrigin.FORM
    branch: Optional[CodeName] = None
    application: Optional[CodeName] = None
    activity: Optional[CodeName] = None
    charge_insurance: bool = False
    insurer: Optional[str] = None
    credit_account: Optional[CodeName] = None
    status: OrderStatus = OrderStatus.PENDING
    messages: List[str] = field(default_factory=list)
    operation: Optional[OperationLink] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    integrated_at: Optional[datetime] = None
    actor: Optional[str] = None


@dataclass
class Capital:
    principal: float
    expenses: float = 0.0
    total: float = 0.0


@dataclass
class Rate:
    nominal: float
    effective: Optional[float] = None


@dataclass
class Term:
    days: Optional[int] = None
    start_date: Optional[date] = None
    due_date: Optional[date] = None


@dataclass
class Interest:
    value: Optional[float] = None
    computed: bool = False


@dataclass
class Insurance:
    charge: bool = False
    insurer: Optional[str] = None
    value: Optional[float] = None


@dataclass
class OperationValidations:
    limit_exceeded: Optional[bool] = None
    credit_line_sufficient: Optional[bool] = None
    client_valid: Optional[bool] = None
    documents_valid: Optional[bool] = None


@dataclass
class LogEntry:
    """Single audit-trail record"""

    action: LogAction
    actor: str
    timestamp: datetime
    detail: Optional[str] = None


@dataclass
class Operation:
    """Discounted-credit contract realized from an order"""

    id: str
    number: str
    order_number: int
    client_code: int
    capital: Capital
    rate: Rate
    type: OperationType = OperationType.DISCOUNT_CHECK
    term: Term = field(default_factory=Term)
    interest: Interest = field(default_factory=Interest)
    insurance: Optional[Insurance] = None
    affected_line: CreditLineRole = CreditLineRole.ENDORSER
    credit_account: Optional[BankAccount] = None
    check_ids: List[str] = field(default_factory=list)
    status: OperationStatus = OperationStatus.PENDING
    validations: OperationValidations = field(default_factory=OperationValidations)
    messages: List[str] = field(default_factory=list)
    log: List[LogEntry] = field(default_factory=list)
    created_at: Optional[datetime] = None
    integrated_at: Optional[datetime] = None
    actor: Optional[str] = None
