from ticketing.responses import ApiModel


class RegistrationCreate(ApiModel):
    ticket_type_id: str


class EventDetails(ApiModel):
    title: str
    start_date: str
    end_date: str
    location: str


class TicketTypeDetails(ApiModel):
    name: str
    price: float


class RegistrationConfirmation(ApiModel):
    registration_id: str
    ticket_code: str
    qr_data: str
    status: str
    event_details: EventDetails
    ticket_type_details: TicketTypeDetails


class RegistrationCancelled(ApiModel):
    registration_id: str
    status: str
    cancelled_at: str
    refund_eligible: bool
    refund_amount: float


class RegisteredEvent(ApiModel):
    id: str
    slug: str
    title: str
    description: str | None
    start_date: str
    end_date: str
    location: str
    image_url: str | None
    status: str


class RegisteredTicketType(ApiModel):
    id: str
    name: str
    description: str | None
    price: float


class RegistrationResponse(ApiModel):
    id: str
    ticket_code: str
    qr_data: str
    status: str
    checked_in_at: str | None
    cancelled_at: str | None
    created_at: str
    event: RegisteredEvent
    ticket_type: RegisteredTicketType
