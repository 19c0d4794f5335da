from fastapi import APIRouter, Request

from ticketing.checkin.schemas import CheckInRequest, CheckInResult
from ticketing.checkin.service import CheckInInput
from ticketing.dependencies import AuthContext, CheckInServiceDep
from ticketing.responses import MessageResponse
from ticketing.validation import parse_body

router = APIRouter()


@router.post("", response_model=MessageResponse[CheckInResult])
async def check_in(
    request: Request,
    ctx: AuthContext,
    service: CheckInServiceDep,
) -> MessageResponse[CheckInResult]:
    data = await parse_body(request, CheckInRequest)
    result = await service.check_in_ticket(
        CheckInInput(
            event_id=data.event_id,
            staff_id=ctx.user.id,
            qr_data=data.qr_data,
            method=data.method,
            location=data.location,
            device_info=data.device_info,
        )
    )
    outcome = result.unwrap()
    return MessageResponse(data=outcome, message=outcome.message)
