from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.domain_events.models import AggregateType, DomainEvent, DomainEventType
from ticketing.domain_events.repository import DomainEventRepository

logger = structlog.get_logger()


class DomainEventLog:
    """Append-only record of what commands did.

    Events are written inside the caller's transaction, so they are only
    persisted when the command commits.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._repository = DomainEventRepository(db)

    async def record(
        self,
        aggregate_type: AggregateType,
        aggregate_id: str,
        event_type: DomainEventType,
        payload: dict,
    ) -> DomainEvent:
        event_id = str(uuid4())
        created_at = datetime.now(UTC).isoformat()
        version = await self._repository.append(
            event_id, aggregate_type, aggregate_id, event_type, payload, created_at
        )
        logger.debug(
            "domain_event_recorded",
            aggregate_id=aggregate_id,
            event_type=event_type,
            version=version,
        )
        return DomainEvent(
            event_id=event_id,
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            event_type=event_type,
            payload=payload,
            version=version,
            created_at=created_at,
        )
