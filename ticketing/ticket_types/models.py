from dataclasses import dataclass


@dataclass(frozen=True)
class ConfigureTicketTypeInput:
    event_id: str
    organizer_id: str
    name: str
    price: float
    quantity: int
    description: str | None = None
    ticket_type_id: str | None = None

    @property
    def is_update(self) -> bool:
        return bool(self.ticket_type_id)
