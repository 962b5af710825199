"""Consumer side of the integration queue"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from discount_gateway.domain.operations import build_operation_from_order
from discount_gateway.services.base import Clock
from discount_gateway.services.integration import OPERATION, ORDER, IntegrationRequested
from discount_gateway.services.operations import OperationService
from discount_gateway.services.orders import OperationFactory, OrderService

logger = logging.getLogger(__name__)


class IntegrationWorker:
    """
    Applies the terminal transition for each `IntegrationRequested` message.

    Each message gets its own session so a failure never leaks state into
    the next one.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        operation_factory: OperationFactory = build_operation_from_order,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.operation_factory = operation_factory

    def handle(self, message: IntegrationRequested) -> None:
        logger.info(
            "Processing integration request",
            extra={"entity": message.entity, "key": message.key, "actor": message.actor},
        )
        db = self.session_factory()
        try:
            if message.entity == ORDER:
                OrderService(
                    db, clock=self.clock, operation_factory=self.operation_factory
                ).complete_integration(int(message.key), message.requested_at)
            elif message.entity == OPERATION:
                OperationService(db, clock=self.clock).complete_integration(
                    message.key, message.requested_at
                )
            else:
                logger.error("Unknown integration entity", extra={"entity": message.entity})
        finally:
            db.close()

    __call__ = handle
