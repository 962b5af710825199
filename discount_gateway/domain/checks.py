"""Check lifecycle - validation and status transitions"""

from datetime import datetime

from discount_gateway.domain.documents import validate_document
from discount_gateway.domain.enums import CheckStatus
from discount_gateway.domain.exceptions import InvalidStateError, ValidationFailedError
from discount_gateway.domain.models import Check, CheckValidations, Party


def _party_complete(party: Party) -> bool:
    return bool(party.name) and bool(party.document)


def refresh_document_validity(check: Check) -> None:
    """Recompute drawer document validity; runs before every save"""
    check.validations.document_valid = validate_document(
        check.drawer.document, check.drawer.person_type
    )


def ensure_editable(check: Check) -> None:
    if check.status == CheckStatus.INTEGRATED:
        raise InvalidStateError(f"Cheque {check.number} integrado não pode ser editado")


def validate_check(check: Check, now: datetime) -> CheckValidations:
    """
    Recompute the validations record of a check.

    The record (including its error list) is replaced wholesale, so running
    this twice with the same `now` and no field changes yields the same result.
    A check due today is still valid.
    """
    validations = CheckValidations(
        document_valid=validate_document(check.drawer.document, check.drawer.person_type),
        due_date_valid=True,
        amount_valid=True,
        drawer_valid=True,
        endorser_valid=True,
    )

    if not validations.document_valid:
        validations.errors.append("Documento do librador inválido")

    if check.due_date is not None and check.due_date < now.date():
        validations.due_date_valid = False
        validations.errors.append("Data de vencimento expirada")

    if check.amount is None or check.amount <= 0:
        validations.amount_valid = False
        validations.errors.append("Valor deve ser maior que zero")

    if not _party_complete(check.drawer):
        validations.drawer_valid = False
        validations.errors.append("Dados do librador incompletos")

    if check.endorser is not None and not _party_complete(check.endorser):
        validations.endorser_valid = False
        validations.errors.append("Dados do endosante incompletos")

    check.validations = validations
    return validations


def approve_check(check: Check, now: datetime) -> None:
    """Gate on the current validations snapshot; callers re-validate first"""
    if check.status != CheckStatus.PENDING:
        raise InvalidStateError("Cheque não está pendente para aprovação")

    v = check.validations
    if not (v.document_valid and v.due_date_valid and v.amount_valid):
        raise ValidationFailedError(
            "Cheque não pode ser aprovado - validações falharam",
            v.errors or ["Validações do cheque não atendidas"],
        )

    check.status = CheckStatus.APPROVED
    check.processed_at = now


def reject_check(check: Check, reason: str, now: datetime) -> None:
    if check.status == CheckStatus.INTEGRATED:
        raise InvalidStateError("Cheque integrado não pode ser rejeitado")
    if not reason or not reason.strip():
        raise ValidationFailedError("Motivo inválido", ["Motivo da rejeição é obrigatório"])

    check.status = CheckStatus.REJECTED
    check.messages.append(f"Rejeitado: {reason}")
    check.processed_at = now


def cancel_check(check: Check) -> None:
    if check.status == CheckStatus.INTEGRATED:
        raise InvalidStateError("Cheque integrado não pode ser cancelado")
    check.status = CheckStatus.CANCELED
