"""Client registry and eligibility checks"""

from typing import List, Optional

from discount_gateway.domain.credit import validate_client
from discount_gateway.domain.enums import ClientStatus, CreditLineRole, PersonType
from discount_gateway.domain.exceptions import (
    DuplicateKeyError,
    NotFoundError,
    ValidationFailedError,
)
from discount_gateway.domain.models import Client, ClientValidation, CodeName
from discount_gateway.domain.patches import ClientPatch
from discount_gateway.infrastructure.database.repositories import ClientRepository
from discount_gateway.services.base import LifecycleService, unit_of_work

MIN_ORGANIZATION_ACTIVITY_CODE = 100_000


class ClientService(LifecycleService):
    entity = "client"

    def __init__(self, db, clock=None):
        super().__init__(db, clock)
        self.clients = ClientRepository(db)

    def get(self, code: int) -> Client:
        client = self.clients.get(code)
        if client is None:
            raise NotFoundError(f"Cliente {code} não encontrado")
        return client

    def list(
        self,
        status: Optional[ClientStatus] = None,
        person_type: Optional[PersonType] = None,
        branch_code: Optional[str] = None,
        limit: int = 50,
    ) -> List[Client]:
        return self.clients.find(status=status, person_type=person_type, branch_code=branch_code, limit=limit)

    def register(self, client: Client) -> Client:
        """Create a client; code and document must both be unused"""
        with unit_of_work(self.db):
            if self.clients.get(client.code) is not None or self.clients.get_by_document(client.document):
                raise DuplicateKeyError("Cliente já existe com este código ou CPF/CNPJ")
            now = self.now()
            client.status = ClientStatus.ACTIVE
            client.registered_at = now
            client.updated_at = now
            created = self.clients.create(client)
        self.transitioned(created.code, None, created.status, None)
        return created

    def update(self, code: int, patch: ClientPatch) -> Client:
        with unit_of_work(self.db):
            client = self.get(code)
            if patch.document and patch.document != client.document:
                other = self.clients.get_by_document(patch.document)
                if other is not None and other.code != code:
                    raise DuplicateKeyError("CPF/CNPJ já existe para outro cliente")
            current = client.status
            patch.apply_to(client)
            client.updated_at = self.now()
            self.ensure_applied(self.clients.update_if_status(client, [current]), code)
        return client

    def set_status(self, code: int, status: ClientStatus) -> Client:
        with unit_of_work(self.db):
            client = self.get(code)
            previous = client.status
            client.status = status
            client.updated_at = self.now()
            self.ensure_applied(self.clients.update_if_status(client, [previous]), code)
        self.transitioned(code, previous, status, None)
        return client

    def deactivate(self, code: int) -> Client:
        """Soft delete; clients are never removed"""
        return self.set_status(code, ClientStatus.INACTIVE)

    def set_activity(self, code: int, activity_code: int, description: str) -> Client:
        if not description:
            raise ValidationFailedError("Atividade inválida", ["Descrição da atividade é obrigatória"])
        with unit_of_work(self.db):
            client = self.get(code)
            if client.person_type == PersonType.ORGANIZATION and activity_code < MIN_ORGANIZATION_ACTIVITY_CODE:
                raise ValidationFailedError(
                    "Atividade inválida", ["Atividade não permitida para pessoa jurídica"]
                )
            current = client.status
            client.activity = CodeName(code=str(activity_code), name=description)
            client.updated_at = self.now()
            self.ensure_applied(self.clients.update_if_status(client, [current]), code)
        return client

    def validate(
        self,
        code: int,
        role: Optional[CreditLineRole] = None,
        requested: Optional[float] = None,
    ) -> ClientValidation:
        return validate_client(self.get(code), role=role, requested=requested)
