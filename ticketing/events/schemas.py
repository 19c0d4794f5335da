from datetime import datetime

from pydantic import ConfigDict, Field

from ticketing.responses import ApiModel


class EventCreate(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=5, max_length=200)
    start_date: datetime
    end_date: datetime
    location: str = Field(min_length=1, max_length=500)
    capacity: int = Field(gt=0)
    description: str | None = Field(default=None, max_length=5000)
    image_url: str | None = Field(default=None, max_length=2048)


class EventUpdate(ApiModel):
    """Partial update. Only the fields present in the body are changed."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    location: str | None = Field(default=None, min_length=1, max_length=500)
    capacity: int | None = Field(default=None, gt=0)
    image_url: str | None = Field(default=None, max_length=2048)


class EventCancel(ApiModel):
    reason: str


class StaffAssign(ApiModel):
    staff_id: str
    role: str | None = Field(default=None, max_length=50)


class TicketTypeSummary(ApiModel):
    id: str
    name: str
    description: str | None
    price: float
    quantity: int
    available: int


class TicketStatsResponse(ApiModel):
    total_tickets: int
    available_tickets: int
    sold_tickets: int
    registration_count: int
    checked_in_count: int
    is_full: bool


class EventResponse(ApiModel):
    id: str
    organizer_id: str
    title: str
    slug: str
    description: str | None
    start_date: str
    end_date: str
    location: str
    capacity: int
    image_url: str | None
    status: str
    created_at: str
    updated_at: str
    published_at: str | None = None
    cancelled_at: str | None = None
    cancellation_reason: str | None = None


class EventDetail(EventResponse):
    ticket_types: list[TicketTypeSummary]
    stats: TicketStatsResponse


class EventPublished(ApiModel):
    event_id: str
    slug: str
    status: str
    published_at: str


class EventCancelled(ApiModel):
    event_id: str
    status: str
    cancelled_at: str
    cancellation_reason: str
    affected_registrations: int


class StaffAssignmentResponse(ApiModel):
    id: str
    event_id: str
    staff_id: str
    staff_name: str
    role: str | None
    assigned_by: str
    created_at: str
