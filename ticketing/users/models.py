from dataclasses import dataclass
from enum import StrEnum


class UserRole(StrEnum):
    attendee = "attendee"
    organizer = "organizer"
    staff = "staff"
    admin = "admin"


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: str
    full_name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
