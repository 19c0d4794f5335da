from dataclasses import dataclass
from typing import Annotated

import aiosqlite
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ticketing.auth import decode_access_token
from ticketing.checkin.service import CheckInService
from ticketing.database import get_db
from ticketing.events.service import EventService
from ticketing.exceptions import AuthenticationError
from ticketing.registrations.service import RegistrationService
from ticketing.ticket_types.service import TicketTypeService
from ticketing.users.models import CurrentUser
from ticketing.users.service import UserService

_bearer = HTTPBearer(auto_error=False)

DBConn = Annotated[aiosqlite.Connection, Depends(get_db)]
BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)]


@dataclass(frozen=True)
class RequestContext:
    """Authenticated caller plus the connection the request works against."""

    user: CurrentUser
    db: aiosqlite.Connection


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None, db: aiosqlite.Connection
) -> CurrentUser | None:
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials)
    return await UserService(db).load_current_user(claims["sub"])


async def get_request_context(credentials: BearerCredentials, db: DBConn) -> RequestContext:
    user = await _resolve_user(credentials, db)
    if user is None:
        raise AuthenticationError()
    return RequestContext(user=user, db=db)


async def get_optional_user(credentials: BearerCredentials, db: DBConn) -> CurrentUser | None:
    try:
        return await _resolve_user(credentials, db)
    except AuthenticationError:
        return None


AuthContext = Annotated[RequestContext, Depends(get_request_context)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]


def get_user_service(db: DBConn) -> UserService:
    return UserService(db)


def get_event_service(db: DBConn) -> EventService:
    return EventService(db)


def get_ticket_type_service(db: DBConn) -> TicketTypeService:
    return TicketTypeService(db)


def get_registration_service(db: DBConn) -> RegistrationService:
    return RegistrationService(db)


def get_check_in_service(db: DBConn) -> CheckInService:
    return CheckInService(db)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
EventServiceDep = Annotated[EventService, Depends(get_event_service)]
TicketTypeServiceDep = Annotated[TicketTypeService, Depends(get_ticket_type_service)]
RegistrationServiceDep = Annotated[RegistrationService, Depends(get_registration_service)]
CheckInServiceDep = Annotated[CheckInService, Depends(get_check_in_service)]
