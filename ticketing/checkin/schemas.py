from typing import Any, Literal

from pydantic import Field

from ticketing.responses import ApiModel


class CheckInRequest(ApiModel):
    event_id: str
    qr_data: str = Field(min_length=1)
    method: Literal["qr", "manual"] = "qr"
    location: str | None = Field(default=None, max_length=100)
    device_info: dict[str, Any] | None = None


class CheckedInRegistration(ApiModel):
    id: str
    attendee_name: str
    ticket_type: str
    checked_in_at: str


class CheckInResult(ApiModel):
    check_in_id: str
    registration: CheckedInRegistration
    message: str
