"""Enumerations shared by the workflow entities.

Stored values keep the vocabulary of the legacy data set so existing records
load unchanged.
"""

from enum import Enum


class PersonType(str, Enum):
    INDIVIDUAL = "FISICA"
    ORGANIZATION = "JURIDICA"


class CreditLineRole(str, Enum):
    DRAWER = "LIBRADOR"
    ENDORSER = "ENDOSANTE"


class ClientStatus(str, Enum):
    ACTIVE = "ATIVO"
    BLOCKED = "BLOQUEADO"
    INACTIVE = "INATIVO"


class Sector(str, Enum):
    PERSONAL = "PERSONAL"
    COMMERCIAL = "COMERCIAL"


class OrderOrigin(str, Enum):
    FORM = "FORMULARIO"
    DISKETTE = "DISKETTE"
    WEB = "WEB"
    SPREADSHEET = "EXCEL"


class OrderStatus(str, Enum):
    PENDING = "PENDENTE"
    PROCESSING = "EM_PROCESSAMENTO"
    INTEGRATED = "INTEGRADA"
    ERROR = "ERRO"
    CANCELED = "CANCELADA"


class CheckStatus(str, Enum):
    PENDING = "PENDENTE"
    APPROVED = "APROVADO"
    REJECTED = "REJEITADO"
    INTEGRATED = "INTEGRADO"
    CANCELED = "CANCELADO"


class OperationType(str, Enum):
    DISCOUNT_CHECK = "DESCONTO_CHEQUE"
    ACCOUNT_CREDIT = "CREDITO_CONTA"
    OTHER = "OUTROS"


class OperationStatus(str, Enum):
    PENDING = "PENDENTE"
    APPROVED = "APROVADA"
    REJECTED = "REJEITADA"
    PROCESSING = "EM_PROCESSAMENTO"
    INTEGRATED = "INTEGRADA"
    ERROR = "ERRO"


class LogAction(str, Enum):
    CREATED = "CRIADA"
    APPROVED = "APROVADA"
    REJECTED = "REJEITADA"
    PROCESSING = "EM_PROCESSAMENTO"
    INTEGRATED = "INTEGRADA"
    ERROR = "ERRO"
    EFFECTIVE_RATE = "TAXA_EFETIVA"
