from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import aiosqlite
import structlog

from ticketing.checkin.repository import CheckInRepository
from ticketing.checkin.schemas import CheckedInRegistration, CheckInResult
from ticketing.commands import CommandService, command
from ticketing.domain_events.models import AggregateType, DomainEventType
from ticketing.events.access import can_manage_event
from ticketing.events.models import EventStatus
from ticketing.events.repository import EventRepository
from ticketing.exceptions import AuthorizationError, BusinessRuleError, NotFoundError
from ticketing.qr import CheckInWindow, check_in_window, parse_qr_data, verify_signature
from ticketing.registrations.models import RegistrationStatus
from ticketing.registrations.repository import RegistrationRepository
from ticketing.utils import parse_timestamp

logger = structlog.get_logger()


@dataclass(frozen=True)
class CheckInInput:
    event_id: str
    staff_id: str
    qr_data: str
    method: str = "qr"
    location: str | None = None
    device_info: dict[str, Any] | None = None


class CheckInService(CommandService):
    def __init__(self, db: aiosqlite.Connection) -> None:
        super().__init__(db)
        self._repo = CheckInRepository(db)
        self._events = EventRepository(db)
        self._registrations = RegistrationRepository(db)

    async def _may_check_in(self, event: dict, staff_id: str) -> bool:
        if await self._events.is_staff_assigned(event["id"], staff_id):
            return True
        return await can_manage_event(self._db, event, staff_id)

    @command("check_in_ticket")
    async def check_in_ticket(self, data: CheckInInput) -> CheckInResult:
        """Validate a scanned ticket and mark its registration as checked in.

        The payload format is checked before the database is consulted. Each
        successful scan leaves a row in the check-in audit trail.
        """
        payload = parse_qr_data(data.qr_data)
        if payload is None:
            raise BusinessRuleError("INVALID_QR_CODE", "QR code format is invalid")

        if payload.event_id != data.event_id:
            raise BusinessRuleError(
                "WRONG_EVENT",
                "This ticket is for a different event",
                {"expectedEventId": data.event_id, "ticketEventId": payload.event_id},
            )

        event = await self._events.get_by_id(data.event_id)
        if not event:
            raise NotFoundError("Event", data.event_id)
        if event["status"] != EventStatus.published:
            raise BusinessRuleError(
                "EVENT_NOT_PUBLISHED",
                "Check-in is only possible for published events",
                {"eventId": data.event_id, "status": event["status"]},
            )

        window = check_in_window(
            parse_timestamp(event["start_date"]), parse_timestamp(event["end_date"])
        )
        if window == CheckInWindow.not_started:
            raise BusinessRuleError(
                "EVENT_NOT_STARTED",
                "Check-in has not opened for this event yet",
                {"eventStartDate": event["start_date"]},
            )
        if window == CheckInWindow.ended:
            raise BusinessRuleError(
                "EVENT_ENDED",
                "Check-in has closed for this event",
                {"eventEndDate": event["end_date"]},
            )
        if not verify_signature(payload):
            raise BusinessRuleError("INVALID_SIGNATURE", "QR code signature is invalid")

        if not await self._may_check_in(event, data.staff_id):
            raise AuthorizationError("You are not assigned as staff for this event")

        registration = await self._registrations.get_for_check_in(
            payload.registration_id, data.event_id
        )
        if not registration:
            raise NotFoundError("Registration", payload.registration_id)
        if registration["status"] == RegistrationStatus.cancelled:
            raise BusinessRuleError(
                "REGISTRATION_CANCELLED",
                "This registration has been cancelled",
                {"registrationId": payload.registration_id},
            )

        already_checked_in = BusinessRuleError(
            "ALREADY_CHECKED_IN",
            "Ticket has already been checked in",
            {
                "registrationId": payload.registration_id,
                "checkedInAt": registration["checked_in_at"],
                "attendeeName": registration["attendee_name"],
            },
        )
        if registration["status"] == RegistrationStatus.checked_in:
            raise already_checked_in

        checked_in_at = datetime.now(UTC).isoformat()
        if not await self._registrations.mark_checked_in(
            payload.registration_id, data.staff_id, checked_in_at
        ):
            raise already_checked_in

        check_in_id = str(uuid4())
        await self._repo.insert(
            {
                "id": check_in_id,
                "registration_id": payload.registration_id,
                "staff_id": data.staff_id,
                "method": data.method,
                "location": data.location,
                "device_info": data.device_info,
                "timestamp": checked_in_at,
            }
        )
        await self._event_log.record(
            aggregate_type=AggregateType.registration,
            aggregate_id=payload.registration_id,
            event_type=DomainEventType.ticket_checked_in,
            payload={
                "event_id": data.event_id,
                "staff_id": data.staff_id,
                "method": data.method,
            },
        )

        logger.info(
            "ticket_checked_in",
            registration_id=payload.registration_id,
            event_id=data.event_id,
            staff_id=data.staff_id,
            method=data.method,
        )

        attendee = registration["attendee_name"]
        return CheckInResult(
            check_in_id=check_in_id,
            registration=CheckedInRegistration(
                id=payload.registration_id,
                attendee_name=attendee,
                ticket_type=registration["ticket_type_name"],
                checked_in_at=checked_in_at,
            ),
            message=f"Welcome, {attendee}!",
        )
