import secrets
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.commands import CommandService, command
from ticketing.domain_events.models import AggregateType, DomainEventType
from ticketing.events.models import EventStatus
from ticketing.events.repository import EventRepository
from ticketing.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from ticketing.qr import generate_qr_data
from ticketing.registrations.models import RegistrationStatus
from ticketing.registrations.repository import RegistrationRepository
from ticketing.registrations.schemas import (
    EventDetails,
    RegistrationCancelled,
    RegistrationConfirmation,
    RegistrationResponse,
    TicketTypeDetails,
)
from ticketing.ticket_types.repository import TicketTypeRepository
from ticketing.users.models import UserRole
from ticketing.users.repository import UserRepository
from ticketing.utils import parse_timestamp

logger = structlog.get_logger()


def generate_ticket_code() -> str:
    return f"TKT-{secrets.token_hex(4).upper()}"


@dataclass(frozen=True)
class RegisterForEventInput:
    event_id: str
    user_id: str
    ticket_type_id: str


def _registration_response(row: dict) -> RegistrationResponse:
    return RegistrationResponse(
        id=row["id"],
        ticket_code=row["ticket_code"],
        qr_data=row["qr_data"],
        status=row["status"],
        checked_in_at=row["checked_in_at"],
        cancelled_at=row["cancelled_at"],
        created_at=row["created_at"],
        event={
            "id": row["event_id"],
            "slug": row["event_slug"],
            "title": row["event_title"],
            "description": row["event_description"],
            "start_date": row["event_start_date"],
            "end_date": row["event_end_date"],
            "location": row["event_location"],
            "image_url": row["event_image_url"],
            "status": row["event_status"],
        },
        ticket_type={
            "id": row["ticket_type_id"],
            "name": row["ticket_type_name"],
            "description": row["ticket_type_description"],
            "price": row["ticket_type_price"],
        },
    )


class RegistrationService(CommandService):
    def __init__(self, db: aiosqlite.Connection) -> None:
        super().__init__(db)
        self._repo = RegistrationRepository(db)
        self._events = EventRepository(db)
        self._ticket_types = TicketTypeRepository(db)
        self._users = UserRepository(db)

    @command("register_for_event")
    async def register_for_event(self, data: RegisterForEventInput) -> RegistrationConfirmation:
        """Claim one ticket of a type and issue its signed QR payload.

        The availability decrement is conditional on stock, so two
        registrations racing for the last ticket cannot both succeed.
        """
        event = await self._events.get_by_id(data.event_id)
        if not event:
            raise NotFoundError("Event", data.event_id)

        if event["status"] != EventStatus.published:
            raise BusinessRuleError(
                "EVENT_NOT_PUBLISHED",
                "Registration is only open for published events",
                {"eventId": data.event_id, "status": event["status"]},
            )

        now = datetime.now(UTC)
        if now >= parse_timestamp(event["start_date"]):
            raise BusinessRuleError(
                "EVENT_ALREADY_STARTED",
                "Registration is closed because the event has already started",
                {"eventId": data.event_id, "startDate": event["start_date"]},
            )

        ticket_type = await self._ticket_types.get(data.event_id, data.ticket_type_id)
        if not ticket_type:
            raise NotFoundError("Ticket type", data.ticket_type_id)

        sold_out = BusinessRuleError(
            "TICKETS_SOLD_OUT",
            "Tickets of this type are sold out",
            {"ticketTypeId": data.ticket_type_id, "ticketTypeName": ticket_type["name"]},
        )
        if ticket_type["available"] <= 0:
            raise sold_out

        existing = await self._repo.find_active(data.event_id, data.user_id, data.ticket_type_id)
        if existing:
            raise BusinessRuleError(
                "DUPLICATE_REGISTRATION",
                "You are already registered for this ticket type",
                {"registrationId": existing["id"], "status": existing["status"]},
            )

        registrations = await self._repo.count_active_for_event(data.event_id)
        if registrations >= event["capacity"]:
            raise BusinessRuleError(
                "CAPACITY_EXCEEDED",
                "Event has reached its capacity",
                {"capacity": event["capacity"], "currentRegistrations": registrations},
            )

        timestamp = now.isoformat()
        if not await self._ticket_types.take_one(data.ticket_type_id, timestamp):
            raise sold_out

        registration_id = str(uuid4())
        registration = {
            "id": registration_id,
            "event_id": data.event_id,
            "user_id": data.user_id,
            "ticket_type_id": data.ticket_type_id,
            "ticket_code": generate_ticket_code(),
            "qr_data": generate_qr_data(data.event_id, registration_id, timestamp),
            "status": RegistrationStatus.confirmed,
            "created_at": timestamp,
        }
        await self._repo.insert(registration)
        await self._event_log.record(
            aggregate_type=AggregateType.registration,
            aggregate_id=registration_id,
            event_type=DomainEventType.registration_created,
            payload={
                "event_id": data.event_id,
                "user_id": data.user_id,
                "ticket_type_id": data.ticket_type_id,
            },
        )

        logger.info(
            "registration_created",
            registration_id=registration_id,
            event_id=data.event_id,
            ticket_type_id=data.ticket_type_id,
        )

        return RegistrationConfirmation(
            registration_id=registration_id,
            ticket_code=registration["ticket_code"],
            qr_data=registration["qr_data"],
            status=RegistrationStatus.confirmed,
            event_details=EventDetails(
                title=event["title"],
                start_date=event["start_date"],
                end_date=event["end_date"],
                location=event["location"],
            ),
            ticket_type_details=TicketTypeDetails(
                name=ticket_type["name"], price=ticket_type["price"]
            ),
        )

    @command("cancel_registration")
    async def cancel_registration(self, registration_id: str, user_id: str) -> RegistrationCancelled:
        registration = await self._repo.get_with_event(registration_id)
        if not registration:
            raise NotFoundError("Registration", registration_id)

        allowed = (
            registration["user_id"] == user_id
            or registration["event_organizer_id"] == user_id
            or await self._users.get_role(user_id) == UserRole.admin
        )
        if not allowed:
            raise AuthorizationError("You are not allowed to cancel this registration")

        if registration["status"] == RegistrationStatus.cancelled:
            raise BusinessRuleError(
                "ALREADY_CANCELLED",
                "Registration is already cancelled",
                {"registrationId": registration_id},
            )
        if registration["status"] == RegistrationStatus.checked_in or registration["checked_in_at"]:
            raise BusinessRuleError(
                "ALREADY_CHECKED_IN",
                "Cannot cancel a registration that has been checked in",
                {"registrationId": registration_id, "checkedInAt": registration["checked_in_at"]},
            )

        now = datetime.now(UTC)
        if parse_timestamp(registration["event_end_date"]) < now:
            raise BusinessRuleError(
                "EVENT_ENDED",
                "Cannot cancel registration after event has ended",
                {"eventEndDate": registration["event_end_date"]},
            )
        if registration["event_status"] == EventStatus.cancelled:
            raise BusinessRuleError(
                "EVENT_CANCELLED",
                "Cannot cancel registration for cancelled event (already cancelled)",
                {"eventId": registration["event_id"]},
            )

        cancelled_at = now.isoformat()
        if not await self._repo.mark_cancelled(registration_id, cancelled_at):
            raise BusinessRuleError(
                "ALREADY_CANCELLED",
                "Registration is already cancelled",
                {"registrationId": registration_id},
            )
        await self._ticket_types.release_one(registration["ticket_type_id"], cancelled_at)
        await self._event_log.record(
            aggregate_type=AggregateType.registration,
            aggregate_id=registration_id,
            event_type=DomainEventType.registration_cancelled,
            payload={"cancelled_by": user_id},
        )

        logger.info("registration_cancelled", registration_id=registration_id, user_id=user_id)

        price = registration["ticket_type_price"]
        return RegistrationCancelled(
            registration_id=registration_id,
            status=RegistrationStatus.cancelled,
            cancelled_at=cancelled_at,
            refund_eligible=price > 0,
            refund_amount=price,
        )

    async def list_for_user(
        self, user_id: str, status: RegistrationStatus | None = None
    ) -> list[RegistrationResponse]:
        rows = await self._repo.list_for_user(user_id, status)
        return [_registration_response(row) for row in rows]
