"""/v1/checks - check endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from discount_gateway.api.dependencies import get_check_service
from discount_gateway.api.v1.schemas import ActorRequest, CheckCreate, RejectRequest
from discount_gateway.domain.enums import CheckStatus
from discount_gateway.domain.models import Check, CheckValidations
from discount_gateway.domain.patches import CheckPatch
from discount_gateway.services.checks import CheckService

router = APIRouter(prefix="/checks")


@router.get("", response_model=List[Check])
def list_checks(
    status: Optional[CheckStatus] = None,
    order: Optional[int] = None,
    client: Optional[int] = None,
    limit: int = Query(100, ge=1, le=500),
    service: CheckService = Depends(get_check_service),
):
    return service.list(status=status, order_number=order, client_code=client, limit=limit)


@router.get("/{check_id}", response_model=Check)
def get_check(check_id: str, service: CheckService = Depends(get_check_service)):
    return service.get(check_id)


@router.post("", response_model=Check, status_code=201)
def create_check(body: CheckCreate, service: CheckService = Depends(get_check_service)):
    return service.create(body.to_domain(), actor=body.actor)


@router.put("/{check_id}", response_model=Check)
def update_check(check_id: str, patch: CheckPatch, service: CheckService = Depends(get_check_service)):
    return service.update(check_id, patch)


@router.post("/{check_id}/validate", response_model=CheckValidations)
def validate_check(check_id: str, service: CheckService = Depends(get_check_service)):
    return service.validate(check_id)


@router.post("/{check_id}/approve", response_model=Check)
def approve_check(
    check_id: str,
    body: Optional[ActorRequest] = None,
    service: CheckService = Depends(get_check_service),
):
    body = body or ActorRequest()
    return service.approve(check_id, actor=body.actor)


@router.post("/{check_id}/reject", response_model=Check)
def reject_check(check_id: str, body: RejectRequest, service: CheckService = Depends(get_check_service)):
    return service.reject(check_id, body.reason, actor=body.actor)


@router.delete("/{check_id}", response_model=Check)
def cancel_check(
    check_id: str,
    actor: Optional[str] = None,
    service: CheckService = Depends(get_check_service),
):
    return service.cancel(check_id, actor=actor)
