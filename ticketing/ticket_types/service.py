from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.commands import CommandService, command
from ticketing.domain_events.models import AggregateType, DomainEventType
from ticketing.events.access import ensure_event_manager
from ticketing.events.models import EventStatus
from ticketing.events.repository import EventRepository
from ticketing.exceptions import BusinessRuleError, NotFoundError, ValidationError
from ticketing.ticket_types.models import ConfigureTicketTypeInput
from ticketing.ticket_types.repository import TicketTypeRepository
from ticketing.ticket_types.schemas import TicketTypeConfigured, TicketTypeDeleted

logger = structlog.get_logger()

MAX_QUANTITY = 100_000


def _validate(data: ConfigureTicketTypeInput) -> None:
    problems: list[str] = []
    name = data.name.strip()
    if len(name) < 3:
        problems.append("Name must be at least 3 characters")
    if len(name) > 100:
        problems.append("Name must not exceed 100 characters")
    if data.price < 0:
        problems.append("Price must be >= 0")
    if data.quantity <= 0:
        problems.append("Quantity must be > 0")
    if data.quantity > MAX_QUANTITY:
        problems.append("Quantity must not exceed 100,000")
    if data.description and len(data.description) > 500:
        problems.append("Description must not exceed 500 characters")

    if problems:
        raise ValidationError("; ".join(problems), {"problems": problems})


class TicketTypeService(CommandService):
    def __init__(self, db: aiosqlite.Connection) -> None:
        super().__init__(db)
        self._repo = TicketTypeRepository(db)
        self._events = EventRepository(db)

    async def _load_managed_event(
        self, event_id: str, user_id: str, action: str, draft_only: bool = True
    ) -> dict:
        event = await self._events.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event", event_id)

        await ensure_event_manager(
            self._db, event, user_id, f"Only the event organizer can {action} ticket types"
        )

        if draft_only and event["status"] != EventStatus.draft:
            raise BusinessRuleError(
                "EVENT_ALREADY_PUBLISHED",
                "Ticket types can only be changed while the event is a draft",
                {"eventId": event_id, "status": event["status"]},
            )
        return event

    @command("configure_ticket_type")
    async def configure_ticket_type(self, data: ConfigureTicketTypeInput) -> TicketTypeConfigured:
        """Create a ticket type, or update one when ``ticket_type_id`` is set.

        Updates keep the number of tickets already sold, so ``available``
        moves with ``quantity``.
        """
        event = await self._load_managed_event(data.event_id, data.organizer_id, "configure")
        _validate(data)

        name = data.name.strip()
        description = data.description.strip() if data.description else None

        if await self._repo.name_taken(data.event_id, name, exclude_id=data.ticket_type_id):
            raise BusinessRuleError(
                "DUPLICATE_TICKET_TYPE",
                "Ticket type with this name already exists",
                {"name": name},
            )

        existing = None
        if data.is_update:
            existing = await self._repo.get(data.event_id, data.ticket_type_id)
            if not existing:
                raise NotFoundError("TicketType", data.ticket_type_id)

        sold = existing["quantity"] - existing["available"] if existing else 0
        if data.quantity < sold:
            raise BusinessRuleError(
                "QUANTITY_BELOW_SOLD",
                f"Cannot reduce quantity below {sold} (already sold)",
                {"sold": sold, "quantity": data.quantity},
            )

        allocated = await self._repo.total_quantity(data.event_id, exclude_id=data.ticket_type_id)
        if allocated + data.quantity > event["capacity"]:
            raise BusinessRuleError(
                "EXCEEDS_CAPACITY",
                "Total ticket quantity would exceed the event capacity",
                {
                    "capacity": event["capacity"],
                    "allocated": allocated,
                    "requested": data.quantity,
                },
            )

        now = datetime.now(UTC).isoformat()
        ticket_type = {
            "id": data.ticket_type_id or str(uuid4()),
            "event_id": data.event_id,
            "name": name,
            "description": description,
            "price": data.price,
            "quantity": data.quantity,
            "available": data.quantity - sold,
            "updated_at": now,
        }
        if existing:
            await self._repo.update(ticket_type)
        else:
            await self._repo.insert({**ticket_type, "created_at": now})

        await self._event_log.record(
            aggregate_type=AggregateType.ticket_type,
            aggregate_id=ticket_type["id"],
            event_type=DomainEventType.ticket_type_configured,
            payload={
                "event_id": data.event_id,
                "name": name,
                "price": data.price,
                "quantity": data.quantity,
                "is_update": existing is not None,
            },
        )

        logger.info(
            "ticket_type_configured",
            event_id=data.event_id,
            ticket_type_id=ticket_type["id"],
            is_update=existing is not None,
        )

        return TicketTypeConfigured(
            ticket_type_id=ticket_type["id"],
            name=name,
            price=data.price,
            quantity=data.quantity,
            available=ticket_type["available"],
        )

    @command("delete_ticket_type")
    async def delete_ticket_type(
        self, event_id: str, ticket_type_id: str, user_id: str
    ) -> TicketTypeDeleted:
        await self._load_managed_event(event_id, user_id, "delete", draft_only=False)

        ticket_type = await self._repo.get(event_id, ticket_type_id)
        if not ticket_type:
            raise NotFoundError("TicketType", ticket_type_id)

        registrations = await self._repo.count_registrations(ticket_type_id)
        if registrations:
            raise BusinessRuleError(
                "TICKET_TYPE_HAS_REGISTRATIONS",
                "Cannot delete ticket type with existing registrations",
                {"registrations": registrations},
            )

        await self._repo.delete(ticket_type_id)
        await self._event_log.record(
            aggregate_type=AggregateType.ticket_type,
            aggregate_id=ticket_type_id,
            event_type=DomainEventType.ticket_type_deleted,
            payload={"event_id": event_id, "name": ticket_type["name"]},
        )

        logger.info("ticket_type_deleted", event_id=event_id, ticket_type_id=ticket_type_id)
        return TicketTypeDeleted(ticket_type_id=ticket_type_id, event_id=event_id)
