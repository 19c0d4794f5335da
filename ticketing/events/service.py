from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.commands import CommandService, command
from ticketing.domain_events.models import AggregateType, DomainEventType
from ticketing.events.access import can_manage_event, ensure_event_manager
from ticketing.events.models import UPDATABLE_FIELDS, EventStatus, EventWindow
from ticketing.events.repository import EventRepository
from ticketing.events.schemas import (
    EventCancelled,
    EventCreate,
    EventDetail,
    EventPublished,
    EventResponse,
    StaffAssignmentResponse,
)
from ticketing.events.stats import compute_ticket_stats
from ticketing.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    NotFoundError,
    ValidationError,
)
from ticketing.registrations.repository import RegistrationRepository
from ticketing.responses import Pagination
from ticketing.ticket_types.repository import TicketTypeRepository
from ticketing.users.models import CurrentUser, UserRole
from ticketing.users.repository import UserRepository
from ticketing.utils import as_utc, parse_timestamp, slugify

logger = structlog.get_logger()

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500
STAFF_ROLES = (UserRole.staff, UserRole.organizer, UserRole.admin)
REQUIRED_FIELDS = ("title", "start_date", "end_date", "location", "capacity")


@dataclass(frozen=True)
class CreateEventInput:
    organizer_id: str
    title: str
    start_date: datetime
    end_date: datetime
    location: str
    capacity: int
    description: str | None = None
    image_url: str | None = None

    @classmethod
    def from_request(cls, organizer_id: str, data: EventCreate) -> "CreateEventInput":
        return cls(organizer_id=organizer_id, **data.model_dump())


def _detail(event: dict, ticket_types: list[dict], registrations: int, checked_in: int) -> EventDetail:
    stats = compute_ticket_stats(ticket_types, registrations, checked_in)
    return EventDetail.model_validate(
        {**event, "ticket_types": ticket_types, "stats": asdict(stats)}
    )


class EventService(CommandService):
    def __init__(self, db: aiosqlite.Connection) -> None:
        super().__init__(db)
        self._repo = EventRepository(db)
        self._ticket_types = TicketTypeRepository(db)
        self._registrations = RegistrationRepository(db)
        self._users = UserRepository(db)

    async def _unique_slug(self, title: str) -> str:
        base = slugify(title)
        taken = await self._repo.slugs_like(base)
        if base not in taken:
            return base
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    async def _load_managed(self, event_id: str, user_id: str, message: str) -> dict:
        event = await self._repo.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event", event_id)
        await ensure_event_manager(self._db, event, user_id, message)
        return event

    @command("create_event")
    async def create_event(self, data: CreateEventInput) -> EventResponse:
        role = await self._users.get_role(data.organizer_id)
        if role is None:
            raise AuthorizationError("User not found")
        if role not in (UserRole.organizer, UserRole.admin):
            raise AuthorizationError("Only organizers can create events")

        title = data.title.strip()
        if not 5 <= len(title) <= 200:
            raise ValidationError(
                "Title must be between 5 and 200 characters", {"length": len(title)}
            )
        if data.capacity <= 0:
            raise ValidationError("Capacity must be greater than 0", {"capacity": data.capacity})

        start_date = as_utc(data.start_date)
        end_date = as_utc(data.end_date)
        now = datetime.now(UTC)
        if start_date <= now:
            raise ValidationError(
                "Event start date must be in the future", {"startDate": start_date.isoformat()}
            )
        if end_date <= start_date:
            raise ValidationError(
                "Event end date must be after start date",
                {"startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
            )

        location = data.location.strip()
        if not location:
            raise ValidationError("Location is required")

        timestamp = now.isoformat()
        event = {
            "id": str(uuid4()),
            "organizer_id": data.organizer_id,
            "title": title,
            "slug": await self._unique_slug(title),
            "description": data.description.strip() if data.description else None,
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
            "location": location,
            "capacity": data.capacity,
            "image_url": data.image_url,
            "status": EventStatus.draft,
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        await self._repo.insert(event)
        await self._event_log.record(
            aggregate_type=AggregateType.event,
            aggregate_id=event["id"],
            event_type=DomainEventType.event_created,
            payload={"title": title, "slug": event["slug"], "organizer_id": data.organizer_id},
        )

        logger.info("event_created", event_id=event["id"], slug=event["slug"])
        return EventResponse.model_validate(event)

    @command("update_event")
    async def update_event(self, event_id: str, user_id: str, changes: dict) -> EventResponse:
        """Apply a partial update to an event's details.

        ``changes`` holds only the fields the caller sent. The resulting start
        and end dates must stay in order, and capacity must still cover the
        ticket types already configured.
        """
        event = await self._load_managed(
            event_id, user_id, "Only the event organizer can update this event"
        )

        updates = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}
        if not updates:
            raise ValidationError("No fields to update")
        if event["status"] == EventStatus.cancelled:
            raise BusinessRuleError(
                "EVENT_CANCELLED", "Cancelled events cannot be updated", {"eventId": event_id}
            )

        emptied = [name for name in REQUIRED_FIELDS if name in updates and updates[name] is None]
        if emptied:
            raise ValidationError(
                "Fields cannot be empty: " + ", ".join(emptied), {"fields": emptied}
            )

        for name in ("start_date", "end_date"):
            if name in updates:
                updates[name] = as_utc(updates[name]).isoformat()
        for name in ("description", "image_url"):
            if name in updates:
                updates[name] = updates[name] or None

        start_date = updates.get("start_date", event["start_date"])
        end_date = updates.get("end_date", event["end_date"])
        if parse_timestamp(end_date) <= parse_timestamp(start_date):
            raise ValidationError(
                "Event end date must be after start date",
                {"startDate": start_date, "endDate": end_date},
            )

        if "capacity" in updates:
            allocated = await self._ticket_types.total_quantity(event_id)
            if updates["capacity"] < allocated:
                raise BusinessRuleError(
                    "EXCEEDS_CAPACITY",
                    "Capacity cannot be lower than the tickets already configured",
                    {"capacity": updates["capacity"], "allocated": allocated},
                )

        updated_at = datetime.now(UTC).isoformat()
        await self._repo.update(event_id, updates, updated_at)
        await self._event_log.record(
            aggregate_type=AggregateType.event,
            aggregate_id=event_id,
            event_type=DomainEventType.event_updated,
            payload={"fields": sorted(updates)},
        )

        logger.info("event_updated", event_id=event_id, fields=sorted(updates))
        return EventResponse.model_validate({**event, **updates, "updated_at": updated_at})

    @command("publish_event")
    async def publish_event(self, event_id: str, user_id: str) -> EventPublished:
        event = await self._load_managed(
            event_id, user_id, "Only the event organizer can publish this event"
        )

        if event["status"] == EventStatus.cancelled:
            raise BusinessRuleError(
                "EVENT_CANCELLED", "Cancelled events cannot be published", {"eventId": event_id}
            )
        if event["status"] != EventStatus.draft:
            raise BusinessRuleError(
                "ALREADY_PUBLISHED",
                "Event has already been published",
                {"eventId": event_id, "status": event["status"]},
            )

        problems: list[str] = []
        if not (event["description"] or "").strip():
            problems.append("Description is required")
        if not (event["location"] or "").strip():
            problems.append("Location is required")
        if parse_timestamp(event["start_date"]) <= datetime.now(UTC):
            problems.append("Event start date must be in the future")

        if await self._ticket_types.count_for_event(event_id) == 0:
            raise BusinessRuleError(
                "NO_TICKET_TYPES",
                "Event must have at least one ticket type before publishing",
                {"eventId": event_id},
            )
        if problems:
            raise BusinessRuleError(
                "INCOMPLETE_EVENT",
                "Event is incomplete: " + "; ".join(problems),
                {"validationErrors": problems},
            )

        published_at = datetime.now(UTC).isoformat()
        await self._repo.mark_published(event_id, published_at)
        await self._event_log.record(
            aggregate_type=AggregateType.event,
            aggregate_id=event_id,
            event_type=DomainEventType.event_published,
            payload={"published_at": published_at},
        )

        logger.info("event_published", event_id=event_id)
        return EventPublished(
            event_id=event_id,
            slug=event["slug"],
            status=EventStatus.published,
            published_at=published_at,
        )

    @command("cancel_event")
    async def cancel_event(self, event_id: str, user_id: str, reason: str) -> EventCancelled:
        """Cancel an event and every confirmed registration for it."""
        event = await self._load_managed(
            event_id, user_id, "Only the event organizer can cancel this event"
        )

        if event["status"] == EventStatus.cancelled:
            raise BusinessRuleError(
                "ALREADY_CANCELLED", "Event is already cancelled", {"eventId": event_id}
            )
        if event["status"] == EventStatus.completed:
            raise BusinessRuleError(
                "ALREADY_COMPLETED", "Completed events cannot be cancelled", {"eventId": event_id}
            )
        if parse_timestamp(event["end_date"]) < datetime.now(UTC):
            raise BusinessRuleError(
                "EVENT_ENDED",
                "Cannot cancel an event that has already ended",
                {"eventEndDate": event["end_date"]},
            )

        reason = reason.strip()
        if len(reason) < REASON_MIN_LENGTH:
            raise BusinessRuleError(
                "INVALID_REASON",
                f"Cancellation reason must be at least {REASON_MIN_LENGTH} characters",
                {"length": len(reason)},
            )
        if len(reason) > REASON_MAX_LENGTH:
            raise BusinessRuleError(
                "INVALID_REASON",
                f"Cancellation reason must not exceed {REASON_MAX_LENGTH} characters",
                {"length": len(reason)},
            )

        cancelled_at = datetime.now(UTC).isoformat()
        await self._repo.mark_cancelled(event_id, reason, cancelled_at)
        affected = await self._registrations.cancel_confirmed_for_event(event_id, cancelled_at)
        await self._event_log.record(
            aggregate_type=AggregateType.event,
            aggregate_id=event_id,
            event_type=DomainEventType.event_cancelled,
            payload={"reason": reason, "affected_registrations": affected},
        )

        logger.info("event_cancelled", event_id=event_id, affected_registrations=affected)
        return EventCancelled(
            event_id=event_id,
            status=EventStatus.cancelled,
            cancelled_at=cancelled_at,
            cancellation_reason=reason,
            affected_registrations=affected,
        )

    @command("assign_staff")
    async def assign_staff(
        self, event_id: str, user_id: str, staff_id: str, role: str | None = None
    ) -> StaffAssignmentResponse:
        await self._load_managed(
            event_id, user_id, "Only the event organizer can assign staff"
        )

        staff = await self._users.get_by_id(staff_id)
        if not staff:
            raise NotFoundError("Staff", staff_id)
        if staff["role"] not in STAFF_ROLES:
            raise BusinessRuleError(
                "INVALID_STAFF_ROLE",
                "Only staff, organizer or admin accounts can be assigned to an event",
                {"staffId": staff_id, "role": staff["role"]},
            )
        if await self._repo.is_staff_assigned(event_id, staff_id):
            raise BusinessRuleError(
                "ALREADY_ASSIGNED",
                "Staff member is already assigned to this event",
                {"staffId": staff_id},
            )

        assignment = {
            "id": str(uuid4()),
            "event_id": event_id,
            "staff_id": staff_id,
            "assigned_by": user_id,
            "role": role.strip() if role else None,
            "created_at": datetime.now(UTC).isoformat(),
        }
        await self._repo.insert_staff_assignment(assignment)
        await self._event_log.record(
            aggregate_type=AggregateType.event,
            aggregate_id=event_id,
            event_type=DomainEventType.staff_assigned,
            payload={"staff_id": staff_id, "role": assignment["role"]},
        )

        logger.info("staff_assigned", event_id=event_id, staff_id=staff_id)
        return StaffAssignmentResponse(**assignment, staff_name=staff["full_name"])

    async def list_published(
        self,
        window: EventWindow | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[EventResponse], Pagination]:
        now = datetime.now(UTC).isoformat()
        search = search.strip() if search else None
        total = await self._repo.count_published(window, search, now)
        rows = await self._repo.list_published(window, search, now, limit, (page - 1) * limit)

        pagination = Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=(total + limit - 1) // limit,
        )
        return [EventResponse.model_validate(row) for row in rows], pagination

    async def get_detail(self, key: str, viewer: CurrentUser | None) -> EventDetail:
        event = await self._repo.get_by_id_or_slug(key)
        if not event:
            raise NotFoundError("Event", key)

        if event["status"] == EventStatus.draft:
            if viewer is None:
                raise AuthenticationError()
            if not await can_manage_event(self._db, event, viewer.id):
                raise NotFoundError("Event", key)

        ticket_types = await self._ticket_types.list_for_event(event["id"])
        registrations, checked_in = await self._repo.registration_counts(event["id"])
        return _detail(event, ticket_types, registrations, checked_in)

    async def list_for_organizer(
        self, organizer_id: str, status: EventStatus | None = None
    ) -> list[EventDetail]:
        """Organizer's events with ticket types and stats, in two queries."""
        events = await self._repo.list_for_organizer(organizer_id, status)
        ticket_types = await self._ticket_types.list_for_events([event["id"] for event in events])
        return [
            _detail(
                event,
                ticket_types.get(event["id"], []),
                event["registration_count"],
                event["checked_in_count"],
            )
            for event in events
        ]
