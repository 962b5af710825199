"""/v1/operations - operation endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from discount_gateway.api.dependencies import get_operation_service
from discount_gateway.api.v1.schemas import (
    ActorRequest,
    ApproveOperationRequest,
    EffectiveRateResponse,
    LimitRequest,
    LimitResponse,
    LogRequest,
    OperationCreate,
    RejectRequest,
    ValidationResponse,
)
from discount_gateway.domain.enums import OperationStatus, OperationType
from discount_gateway.domain.models import LogEntry, Operation
from discount_gateway.domain.patches import OperationPatch
from discount_gateway.services.operations import OperationService

router = APIRouter(prefix="/operations")


@router.get("", response_model=List[Operation])
def list_operations(
    status: Optional[OperationStatus] = None,
    type: Optional[OperationType] = None,
    client: Optional[int] = None,
    order: Optional[int] = None,
    limit: int = Query(50, ge=1, le=500),
    service: OperationService = Depends(get_operation_service),
):
    return service.list(status=status, type=type, client_code=client, order_number=order, limit=limit)


@router.get("/by-number/{number}", response_model=Operation)
def get_operation_by_number(number: str, service: OperationService = Depends(get_operation_service)):
    return service.get_by_number(number)


@router.get("/{operation_id}", response_model=Operation)
def get_operation(operation_id: str, service: OperationService = Depends(get_operation_service)):
    return service.get(operation_id)


@router.post("", response_model=Operation, status_code=201)
def create_operation(body: OperationCreate, service: OperationService = Depends(get_operation_service)):
    return service.create(body.to_domain(), actor=body.actor)


@router.put("/{operation_id}", response_model=Operation)
def update_operation(
    operation_id: str,
    patch: OperationPatch,
    service: OperationService = Depends(get_operation_service),
):
    return service.update(operation_id, patch)


@router.post("/{operation_id}/effective-rate", response_model=EffectiveRateResponse)
def calculate_effective_rate(
    operation_id: str,
    body: Optional[ActorRequest] = None,
    service: OperationService = Depends(get_operation_service),
):
    body = body or ActorRequest()
    return EffectiveRateResponse(**service.calculate_effective_rate(operation_id, actor=body.actor))


@router.post("/{operation_id}/limits", response_model=LimitResponse)
def validate_limits(
    operation_id: str,
    body: LimitRequest,
    service: OperationService = Depends(get_operation_service),
):
    within = service.validate_limits(operation_id, body.max_limit)
    return LimitResponse(within_limit=within, operation=service.get(operation_id))


@router.post("/{operation_id}/client-validation", response_model=ValidationResponse)
def validate_operation_client(operation_id: str, service: OperationService = Depends(get_operation_service)):
    result = service.validate_client(operation_id)
    return ValidationResponse(valid=result.valid, reasons=result.reasons)


@router.post("/{operation_id}/approve", response_model=Operation)
def approve_operation(
    operation_id: str,
    body: Optional[ApproveOperationRequest] = None,
    service: OperationService = Depends(get_operation_service),
):
    body = body or ApproveOperationRequest()
    return service.approve(operation_id, actor=body.actor, max_limit=body.max_limit)


@router.post("/{operation_id}/reject", response_model=Operation)
def reject_operation(
    operation_id: str,
    body: RejectRequest,
    service: OperationService = Depends(get_operation_service),
):
    return service.reject(operation_id, body.reason, actor=body.actor)


@router.post("/{operation_id}/integrate", response_model=Operation, status_code=202)
def integrate_operation(
    operation_id: str,
    body: Optional[ActorRequest] = None,
    service: OperationService = Depends(get_operation_service),
):
    """Responds once the operation is EM_PROCESSAMENTO; completion is asynchronous"""
    body = body or ActorRequest()
    return service.integrate(operation_id, actor=body.actor)


@router.post("/{operation_id}/log", response_model=LogEntry, status_code=201)
def add_log_entry(
    operation_id: str,
    body: LogRequest,
    service: OperationService = Depends(get_operation_service),
):
    return service.add_log(operation_id, body.action, actor=body.actor, detail=body.detail)
