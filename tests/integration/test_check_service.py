"""Integration tests for the check lifecycle service"""

from datetime import timedelta

import pytest

from discount_gateway.domain.enums import CheckStatus
from discount_gateway.domain.exceptions import (
    DuplicateKeyError,
    InvalidStateError,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.domain.patches import CheckPatch, PartyIn


def test_create_assigns_id_and_document_validity(check_service, pending_order, make_check, clock):
    check = check_service.create(make_check(), actor="caixa")
    assert check.id
    assert check.status == CheckStatus.PENDING
    assert check.validations.document_valid is True
    assert check.created_at == clock.now
    assert check.actor == "caixa"


def test_create_requires_order_and_client(check_service, registered_client, make_check):
    with pytest.raises(NotFoundError):
        check_service.create(make_check(order_number=404))


def test_create_rejects_duplicate_number_and_bank(check_service, pending_order, make_check):
    check_service.create(make_check())
    with pytest.raises(DuplicateKeyError):
        check_service.create(make_check())
    # Same number on another bank is a different check
    assert check_service.create(make_check(bank_code="237")).bank_code == "237"


def test_validate_persists_and_is_idempotent(check_service, pending_order, make_check, today):
    check = check_service.create(make_check(due_date=today - timedelta(days=1)))

    first = check_service.validate(check.id)
    second = check_service.validate(check.id)

    assert first == second
    assert first.errors == ["Data de vencimento expirada"]
    assert check_service.get(check.id).validations.errors == ["Data de vencimento expirada"]


def test_expired_check_approval_is_refused(check_service, pending_order, make_check, today):
    check = check_service.create(make_check(due_date=today - timedelta(days=1)))

    with pytest.raises(ValidationFailedError) as exc_info:
        check_service.approve(check.id)

    assert "Data de vencimento expirada" in exc_info.value.reasons
    stored = check_service.get(check.id)
    assert stored.status == CheckStatus.PENDING
    assert stored.validations.due_date_valid is False


def test_approve_revalidates_against_current_clock(check_service, pending_order, make_check, today, clock):
    check = check_service.create(make_check(due_date=today + timedelta(days=1)))
    check_service.validate(check.id)

    clock.advance(days=2)
    with pytest.raises(ValidationFailedError):
        check_service.approve(check.id)


def test_approve(check_service, pending_order, make_check, clock):
    check = check_service.create(make_check())
    approved = check_service.approve(check.id, actor="gerente")
    assert approved.status == CheckStatus.APPROVED
    assert check_service.get(check.id).processed_at == clock.now


def test_reject_and_cancel(check_service, pending_order, make_check):
    first = check_service.create(make_check(number="1"))
    second = check_service.create(make_check(number="2"))

    rejected = check_service.reject(first.id, "Assinatura divergente")
    assert rejected.messages == ["Rejeitado: Assinatura divergente"]
    assert check_service.cancel(second.id).status == CheckStatus.CANCELED


def test_update_recomputes_document_validity(check_service, pending_order, make_check):
    check = check_service.create(make_check())
    updated = check_service.update(
        check.id, CheckPatch(drawer=PartyIn(name="Outro", document="123", person_type="FISICA"))
    )
    assert updated.validations.document_valid is False
    assert check_service.get(check.id).validations.document_valid is False


def test_integrated_check_is_locked(check_service, pending_order, make_check, db):
    check = check_service.create(make_check())
    stored = check_service.get(check.id)
    stored.status = CheckStatus.INTEGRATED
    check_service.checks.update_if_status(stored, [CheckStatus.PENDING])
    db.commit()

    with pytest.raises(InvalidStateError):
        check_service.update(check.id, CheckPatch(amount=1.0))
    with pytest.raises(InvalidStateError):
        check_service.reject(check.id, "motivo")
    with pytest.raises(InvalidStateError):
        check_service.cancel(check.id)
    with pytest.raises(InvalidStateError):
        check_service.approve(check.id)

    # Validation still reports but writes nothing
    before = check_service.get(check.id).validations
    check_service.validate(check.id)
    assert check_service.get(check.id).validations == before
    assert check_service.get(check.id).status == CheckStatus.INTEGRATED


def test_list_by_order(check_service, pending_order, make_check):
    check_service.create(make_check(number="1"))
    check_service.create(make_check(number="2"))
    assert len(check_service.list(order_number=pending_order.number)) == 2
    assert check_service.list(status=CheckStatus.APPROVED) == []
