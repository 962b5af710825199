"""/v1/clients - client registry endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from discount_gateway.api.dependencies import get_client_service
from discount_gateway.api.v1.schemas import ActivityRequest, ClientCreate, ClientStatusRequest
from discount_gateway.domain.enums import ClientStatus, CreditLineRole, PersonType
from discount_gateway.domain.models import Client, ClientValidation
from discount_gateway.domain.patches import ClientPatch
from discount_gateway.services.clients import ClientService

router = APIRouter(prefix="/clients")


@router.get("", response_model=List[Client])
def list_clients(
    status: Optional[ClientStatus] = None,
    person_type: Optional[PersonType] = None,
    branch: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    service: ClientService = Depends(get_client_service),
):
    return service.list(status=status, person_type=person_type, branch_code=branch, limit=limit)


@router.get("/{code}", response_model=Client)
def get_client(code: int, service: ClientService = Depends(get_client_service)):
    return service.get(code)


@router.post("", response_model=Client, status_code=201)
def register_client(body: ClientCreate, service: ClientService = Depends(get_client_service)):
    return service.register(body.to_domain())


@router.put("/{code}", response_model=Client)
def update_client(code: int, patch: ClientPatch, service: ClientService = Depends(get_client_service)):
    return service.update(code, patch)


@router.delete("/{code}", response_model=Client)
def deactivate_client(code: int, service: ClientService = Depends(get_client_service)):
    """Soft delete: the client is marked INATIVO"""
    return service.deactivate(code)


@router.post("/{code}/status", response_model=Client)
def set_client_status(
    code: int,
    body: ClientStatusRequest,
    service: ClientService = Depends(get_client_service),
):
    return service.set_status(code, body.status)


@router.post("/{code}/activity", response_model=Client)
def set_client_activity(
    code: int,
    body: ActivityRequest,
    service: ClientService = Depends(get_client_service),
):
    return service.set_activity(code, body.code, body.description)


@router.get("/{code}/validation", response_model=ClientValidation)
def validate_client(
    code: int,
    role: Optional[CreditLineRole] = None,
    amount: Optional[float] = Query(None, ge=0),
    service: ClientService = Depends(get_client_service),
):
    """Eligibility report with per-role credit capacity"""
    return service.validate(code, role=role, requested=amount)
