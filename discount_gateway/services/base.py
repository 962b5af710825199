"""Shared plumbing for the lifecycle services"""

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from discount_gateway.config import settings
from discount_gateway.domain.exceptions import InvalidStateError
from discount_gateway.infrastructure.observability.logging import log_transition
from discount_gateway.infrastructure.observability.metrics import (
    record_stale_transition,
    record_transition,
)
from discount_gateway.utils.date_utils import utcnow

Clock = Callable[[], datetime]


@contextmanager
def unit_of_work(db: Session) -> Iterator[None]:
    """Commit on success, roll back and re-raise on any error"""
    try:
        yield
        db.commit()
    except Exception:
        db.rollback()
        raise


class LifecycleService:
    """Base for services that apply guarded status transitions"""

    entity = "entity"

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or utcnow

    def now(self) -> datetime:
        return self.clock()

    @staticmethod
    def actor_or_default(actor: Optional[str]) -> str:
        return actor or settings.default_actor

    def ensure_applied(self, updated: bool, key) -> None:
        """A guarded update that matched nothing means a concurrent change won"""
        if not updated:
            record_stale_transition(self.entity)
            raise InvalidStateError(
                f"{self.entity} {key} foi alterado por outra operação; recarregue e tente novamente"
            )

    def transitioned(self, key, from_status, to_status, actor: Optional[str]) -> None:
        record_transition(self.entity, to_status.value)
        log_transition(
            self.entity,
            key,
            from_status.value if from_status is not None else None,
            to_status.value,
            actor,
        )


def latency_seconds(requested_at: Optional[datetime], now: datetime) -> Optional[float]:
    """Time between scheduling an integration and applying its outcome"""
    if requested_at is None:
        return None
    return (now - requested_at).total_seconds()
