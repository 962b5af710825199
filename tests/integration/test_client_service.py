"""Integration tests for the client registry"""

import pytest

from discount_gateway.domain.enums import ClientStatus, CreditLineRole, PersonType
from discount_gateway.domain.exceptions import DuplicateKeyError, NotFoundError, ValidationFailedError
from discount_gateway.domain.patches import ClientPatch

VALID_CNPJ = "11.222.333/0001-81"


def test_register_sets_active_and_timestamps(client_service, make_client, clock):
    client = client_service.register(make_client(status=ClientStatus.BLOCKED))
    assert client.status == ClientStatus.ACTIVE
    assert client.registered_at == clock.now
    assert client_service.get(1001).name == "Maria da Silva"


def test_register_duplicate_code_or_document(client_service, make_client):
    client_service.register(make_client())
    with pytest.raises(DuplicateKeyError):
        client_service.register(make_client(document=VALID_CNPJ))
    with pytest.raises(DuplicateKeyError):
        client_service.register(make_client(code=2002))


def test_get_unknown_client(client_service):
    with pytest.raises(NotFoundError):
        client_service.get(999)


def test_update_rechecks_document_uniqueness(client_service, make_client):
    client_service.register(make_client())
    client_service.register(
        make_client(code=2002, document=VALID_CNPJ, person_type=PersonType.ORGANIZATION)
    )
    with pytest.raises(DuplicateKeyError):
        client_service.update(2002, ClientPatch(document="529.982.247-25"))

    updated = client_service.update(2002, ClientPatch(name="Empresa Renomeada"))
    assert updated.name == "Empresa Renomeada"
    assert client_service.get(2002).name == "Empresa Renomeada"


def test_deactivate_is_soft(client_service, registered_client):
    client_service.deactivate(registered_client.code)
    assert client_service.get(registered_client.code).status == ClientStatus.INACTIVE
    assert client_service.list(status=ClientStatus.INACTIVE)[0].code == registered_client.code


def test_organization_activity_code_floor(client_service, make_client):
    client_service.register(
        make_client(code=2002, document=VALID_CNPJ, person_type=PersonType.ORGANIZATION)
    )
    with pytest.raises(ValidationFailedError) as exc_info:
        client_service.set_activity(2002, 99_999, "Comércio varejista")
    assert exc_info.value.reasons == ["Atividade não permitida para pessoa jurídica"]

    client = client_service.set_activity(2002, 100_000, "Comércio atacadista")
    assert client.activity.code == "100000"
    assert client_service.get(2002).activity.name == "Comércio atacadista"


def test_individual_may_take_any_activity_code(client_service, registered_client):
    client = client_service.set_activity(registered_client.code, 12, "Autônomo")
    assert client.activity.code == "12"


def test_validate_reports_capacity(client_service, registered_client):
    result = client_service.validate(registered_client.code, CreditLineRole.DRAWER, 45_000.0)
    assert result.valid is False
    assert result.capacity[CreditLineRole.DRAWER].available == 40_000.0
    assert result.capacity[CreditLineRole.ENDORSER].available == 80_000.0
    assert result.has_bank_account is True


def test_list_filters(client_service, make_client):
    client_service.register(make_client())
    client_service.register(
        make_client(code=2002, document=VALID_CNPJ, person_type=PersonType.ORGANIZATION)
    )
    assert [c.code for c in client_service.list(person_type=PersonType.ORGANIZATION)] == [2002]
    assert [c.code for c in client_service.list()] == [1001, 2002]
