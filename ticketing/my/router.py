from enum import StrEnum
from typing import TypeVar

from fastapi import APIRouter

from ticketing.dependencies import AuthContext
from ticketing.events.models import EventStatus
from ticketing.events.schemas import EventDetail
from ticketing.events.service import EventService
from ticketing.registrations.models import RegistrationStatus
from ticketing.registrations.schemas import RegistrationResponse
from ticketing.registrations.service import RegistrationService
from ticketing.responses import DataResponse

router = APIRouter()

StatusT = TypeVar("StatusT", bound=StrEnum)


def _status_filter(enum_cls: type[StatusT], value: str | None) -> StatusT | None:
    """Unknown status values mean no filter rather than an error."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


@router.get("/events", response_model=DataResponse[list[EventDetail]])
async def my_events(
    ctx: AuthContext,
    status: str | None = None,
) -> DataResponse[list[EventDetail]]:
    events = await EventService(ctx.db).list_for_organizer(
        ctx.user.id, _status_filter(EventStatus, status)
    )
    return DataResponse(data=events)


@router.get("/registrations", response_model=DataResponse[list[RegistrationResponse]])
async def my_registrations(
    ctx: AuthContext,
    status: str | None = None,
) -> DataResponse[list[RegistrationResponse]]:
    registrations = await RegistrationService(ctx.db).list_for_user(
        ctx.user.id, _status_filter(RegistrationStatus, status)
    )
    return DataResponse(data=registrations)
