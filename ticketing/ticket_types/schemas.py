from pydantic import ConfigDict, Field, field_validator

from ticketing.responses import ApiModel


class TicketTypeConfigure(ApiModel):
    """Body of the configure route. ``ticket_type_id`` selects update over create."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=3, max_length=100)
    price: float = Field(ge=0)
    quantity: int = Field(gt=0, le=100_000)
    description: str | None = Field(default=None, max_length=500)
    ticket_type_id: str | None = None

    @field_validator("ticket_type_id")
    @classmethod
    def blank_id_means_create(cls, value: str | None) -> str | None:
        return value or None


class TicketTypeConfigured(ApiModel):
    ticket_type_id: str
    name: str
    price: float
    quantity: int
    available: int


class TicketTypeDeleted(ApiModel):
    ticket_type_id: str
    event_id: str
