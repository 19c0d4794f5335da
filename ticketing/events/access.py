import aiosqlite

from ticketing.exceptions import AuthorizationError
from ticketing.users.models import UserRole
from ticketing.users.repository import UserRepository


async def can_manage_event(db: aiosqlite.Connection, event: dict, user_id: str) -> bool:
    if event["organizer_id"] == user_id:
        return True
    return await UserRepository(db).get_role(user_id) == UserRole.admin


async def ensure_event_manager(
    db: aiosqlite.Connection,
    event: dict,
    user_id: str,
    message: str = "Only the event organizer can manage this event",
) -> None:
    if not await can_manage_event(db, event, user_id):
        raise AuthorizationError(message)
