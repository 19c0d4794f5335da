from fastapi import APIRouter, Request, Response

from ticketing.dependencies import AuthContext, TicketTypeServiceDep
from ticketing.responses import MessageResponse
from ticketing.ticket_types.models import ConfigureTicketTypeInput
from ticketing.ticket_types.schemas import (
    TicketTypeConfigure,
    TicketTypeConfigured,
    TicketTypeDeleted,
)
from ticketing.validation import parse_body

router = APIRouter()


@router.post(
    "/{event_id}/ticket-types",
    status_code=201,
    response_model=MessageResponse[TicketTypeConfigured],
)
async def configure_ticket_type(
    event_id: str,
    request: Request,
    response: Response,
    ctx: AuthContext,
    service: TicketTypeServiceDep,
) -> MessageResponse[TicketTypeConfigured]:
    data = await parse_body(request, TicketTypeConfigure)
    command_input = ConfigureTicketTypeInput(
        event_id=event_id,
        organizer_id=ctx.user.id,
        name=data.name,
        price=data.price,
        quantity=data.quantity,
        description=data.description,
        ticket_type_id=data.ticket_type_id,
    )
    result = await service.configure_ticket_type(command_input)
    ticket_type = result.unwrap()

    if command_input.is_update:
        response.status_code = 200
        return MessageResponse(data=ticket_type, message="Ticket type updated successfully")
    return MessageResponse(data=ticket_type, message="Ticket type created successfully")


@router.delete(
    "/{event_id}/ticket-types/{ticket_type_id}",
    response_model=MessageResponse[TicketTypeDeleted],
)
async def delete_ticket_type(
    event_id: str,
    ticket_type_id: str,
    ctx: AuthContext,
    service: TicketTypeServiceDep,
) -> MessageResponse[TicketTypeDeleted]:
    result = await service.delete_ticket_type(event_id, ticket_type_id, ctx.user.id)
    return MessageResponse(data=result.unwrap(), message="Ticket type deleted successfully")
