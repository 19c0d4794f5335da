from fastapi import APIRouter, Request

from ticketing.dependencies import AuthContext, RegistrationServiceDep
from ticketing.registrations.schemas import (
    RegistrationCancelled,
    RegistrationConfirmation,
    RegistrationCreate,
)
from ticketing.registrations.service import RegisterForEventInput
from ticketing.responses import MessageResponse
from ticketing.validation import parse_body

router = APIRouter()


@router.post(
    "/events/{event_id}/register",
    status_code=201,
    response_model=MessageResponse[RegistrationConfirmation],
)
async def register_for_event(
    event_id: str,
    request: Request,
    ctx: AuthContext,
    service: RegistrationServiceDep,
) -> MessageResponse[RegistrationConfirmation]:
    data = await parse_body(request, RegistrationCreate)
    result = await service.register_for_event(
        RegisterForEventInput(
            event_id=event_id, user_id=ctx.user.id, ticket_type_id=data.ticket_type_id
        )
    )
    return MessageResponse(data=result.unwrap(), message="Registration successful")


@router.post(
    "/registrations/{registration_id}/cancel",
    response_model=MessageResponse[RegistrationCancelled],
)
async def cancel_registration(
    registration_id: str,
    ctx: AuthContext,
    service: RegistrationServiceDep,
) -> MessageResponse[RegistrationCancelled]:
    result = await service.cancel_registration(registration_id, ctx.user.id)
    return MessageResponse(data=result.unwrap(), message="Registration cancelled successfully")
