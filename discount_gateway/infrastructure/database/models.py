"""SQLAlchemy ORM models for the credit workflow tables"""

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ClientRecord(Base):
    """Registered credit client"""

    __tablename__ = "client"

    code = Column(BigInteger, primary_key=True, autoincrement=False)
    name = Column(Text, nullable=False)
    person_type = Column(String(16), nullable=False)
    document = Column(String(32), nullable=False, unique=True, index=True)
    branch = Column(JSON, nullable=True)
    application = Column(JSON, nullable=True)
    activity = Column(JSON, nullable=True)
    credit_lines = Column(JSON, nullable=False, default=dict)
    bank_account = Column(JSON, nullable=True)
    insurance_enabled = Column(Boolean, nullable=False, default=False)
    insurer = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="ATIVO", index=True)
    restrictions = Column(JSON, nullable=False, default=list)
    registered_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)


class OrderRecord(Base):
    """Credit order with denormalized client snapshot"""

    __tablename__ = "credit_order"

    number = Column(BigInteger, primary_key=True, autoincrement=False)
    client_code = Column(BigInteger, nullable=True, index=True)
    client_name = Column(Text, nullable=True)
    rate = Column(Float, nullable=False)
    expenses = Column(JSON, nullable=False)
    sector = Column(String(16), nullable=False)
    affected_line = Column(String(16), nullable=False)
    origin = Column(String(16), nullable=False, index=True)
    branch = Column(JSON, nullable=True)
    application = Column(JSON, nullable=True)
    activity = Column(JSON, nullable=True)
    charge_insurance = Column(Boolean, nullable=False, default=False)
    insurer = Column(Text, nullable=True)
    credit_account = Column(JSON, nullable=True)
    status = Column(String(24), nullable=False, default="PENDENTE", index=True)
    messages = Column(JSON, nullable=False, default=list)
    operation_number = Column(String(40), nullable=True)
    operation_integrated_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)
    integrated_at = Column(DateTime, nullable=True)
    actor = Column(Text, nullable=True)


class CheckRecord(Base):
    """Bank check attached to an order"""

    __tablename__ = "discount_check"
    __table_args__ = (UniqueConstraint("number", "bank_code", name="uq_check_number_bank"),)

    id = Column(String(36), primary_key=True)
    number = Column(String(32), nullable=False, index=True)
    bank_code = Column(String(16), nullable=False)
    bank_name = Column(Text, nullable=True)
    agency = Column(Text, nullable=True)
    account = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    issue_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    drawer = Column(JSON, nullable=False)
    endorser = Column(JSON, nullable=True)
    order_number = Column(BigInteger, ForeignKey("credit_order.number"), nullable=False, index=True)
    client_code = Column(BigInteger, ForeignKey("client.code"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="PENDENTE", index=True)
    validations = Column(JSON, nullable=False, default=dict)
    messages = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    processed_at = Column(DateTime, nullable=True)
    actor = Column(Text, nullable=True)


class OperationRecord(Base):
    """Discounted-credit contract with append-only audit log"""

    __tablename__ = "credit_operation"

    id = Column(String(36), primary_key=True)
    number = Column(String(40), nullable=False, unique=True, index=True)
    order_number = Column(BigInteger, ForeignKey("credit_order.number"), nullable=False, index=True)
    client_code = Column(BigInteger, ForeignKey("client.code"), nullable=False, index=True)
    type = Column(String(24), nullable=False, index=True)
    principal = Column(Float, nullable=False)
    expenses = Column(Float, nullable=False, default=0.0)
    capital_total = Column(Float, nullable=False)
    nominal_rate = Column(Float, nullable=False)
    effective_rate = Column(Float, nullable=True)
    term_days = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    interest_value = Column(Float, nullable=True)
    interest_computed = Column(Boolean, nullable=False, default=False)
    insurance = Column(JSON, nullable=True)
    affected_line = Column(String(16), nullable=False)
    credit_account = Column(JSON, nullable=True)
    check_ids = Column(JSON, nullable=False, default=list)
    status = Column(String(24), nullable=False, default="PENDENTE", index=True)
    validations = Column(JSON, nullable=False, default=dict)
    messages = Column(JSON, nullable=False, default=list)
    log = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    integrated_at = Column(DateTime, nullable=True)
    actor = Column(Text, nullable=True)
