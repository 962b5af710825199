"""/v1/orders - credit order endpoints"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from discount_gateway.api.dependencies import get_order_service, get_request_id
from discount_gateway.api.v1.schemas import (
    ActorRequest,
    OrderCreate,
    OrderIntegrationResponse,
    ValidationResponse,
)
from discount_gateway.domain.enums import OrderOrigin, OrderStatus
from discount_gateway.domain.models import Check, Order
from discount_gateway.domain.patches import OrderPatch
from discount_gateway.services.orders import OrderService

router = APIRouter(prefix="/orders")

logger = logging.getLogger(__name__)


@router.get("", response_model=List[Order])
def list_orders(
    status: Optional[OrderStatus] = None,
    client: Optional[int] = None,
    origin: Optional[OrderOrigin] = None,
    limit: int = Query(50, ge=1, le=500),
    service: OrderService = Depends(get_order_service),
):
    return service.list(status=status, client_code=client, origin=origin, limit=limit)


@router.get("/{number}", response_model=Order)
def get_order(number: int, service: OrderService = Depends(get_order_service)):
    return service.get(number)


@router.get("/{number}/checks", response_model=List[Check])
def list_order_checks(number: int, service: OrderService = Depends(get_order_service)):
    return service.checks_for(number)


@router.post("", response_model=Order, status_code=201)
def create_order(body: OrderCreate, service: OrderService = Depends(get_order_service)):
    return service.create(body.to_domain(), actor=body.actor)


@router.put("/{number}", response_model=Order)
def update_order(number: int, patch: OrderPatch, service: OrderService = Depends(get_order_service)):
    return service.update(number, patch)


@router.get("/{number}/validation", response_model=ValidationResponse)
def validate_order(number: int, service: OrderService = Depends(get_order_service)):
    """Dry-run of the integration rules; the order is not changed"""
    result = service.validate_for_integration(number)
    return ValidationResponse(valid=result.valid, reasons=result.reasons)


@router.post("/{number}/integrate", response_model=OrderIntegrationResponse, status_code=202)
def integrate_order(
    number: int,
    request: Request,
    body: Optional[ActorRequest] = None,
    service: OrderService = Depends(get_order_service),
):
    """
    Start integration of an order.

    Responds once the order is EM_PROCESSAMENTO; the integration worker
    later moves it to INTEGRADA (creating its operation) or ERRO.
    """
    body = body or ActorRequest()
    order, result = service.integrate(number, actor=body.actor)
    logger.info(
        "Order integration scheduled",
        extra={"request_id": get_request_id(request), "order": number},
    )
    return OrderIntegrationResponse(
        order=order, validation=ValidationResponse(valid=result.valid, reasons=result.reasons)
    )


@router.delete("/{number}", response_model=Order)
def cancel_order(
    number: int,
    actor: Optional[str] = None,
    service: OrderService = Depends(get_order_service),
):
    return service.cancel(number, actor=actor)
