"""Dependency injection for FastAPI endpoints"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from discount_gateway.infrastructure.database.session import get_db
from discount_gateway.services.base import Clock
from discount_gateway.services.checks import CheckService
from discount_gateway.services.clients import ClientService
from discount_gateway.services.integration import IntegrationScheduler
from discount_gateway.services.operations import OperationService
from discount_gateway.services.orders import OrderService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_scheduler(request: Request) -> Optional[IntegrationScheduler]:
    """Integration queue started with the application, if any"""
    return getattr(request.app.state, "integration_queue", None)


def get_clock() -> Optional[Clock]:
    """None means the services use the system UTC clock"""
    return None


def get_client_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> ClientService:
    return ClientService(db, clock=clock)


def get_check_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> CheckService:
    return CheckService(db, clock=clock)


def get_order_service(
    db: Session = Depends(get_db),
    scheduler=Depends(get_scheduler),
    clock=Depends(get_clock),
) -> OrderService:
    return OrderService(db, scheduler=scheduler, clock=clock)


def get_operation_service(
    db: Session = Depends(get_db),
    scheduler=Depends(get_scheduler),
    clock=Depends(get_clock),
) -> OperationService:
    return OperationService(db, scheduler=scheduler, clock=clock)
