from dataclasses import dataclass
from enum import StrEnum


class AggregateType(StrEnum):
    event = "event"
    ticket_type = "ticket_type"
    registration = "registration"


class DomainEventType(StrEnum):
    event_created = "event_created"
    event_updated = "event_updated"
    event_published = "event_published"
    event_cancelled = "event_cancelled"
    ticket_type_configured = "ticket_type_configured"
    ticket_type_deleted = "ticket_type_deleted"
    staff_assigned = "staff_assigned"
    registration_created = "registration_created"
    registration_cancelled = "registration_cancelled"
    ticket_checked_in = "ticket_checked_in"


@dataclass(frozen=True)
class DomainEvent:
    event_id: str
    aggregate_type: str
    aggregate_id: str
    event_type: str
    payload: dict
    version: int
    created_at: str
