from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class TicketStats:
    total_tickets: int
    available_tickets: int
    sold_tickets: int
    registration_count: int
    checked_in_count: int
    is_full: bool


def compute_ticket_stats(
    ticket_types: Iterable[Mapping],
    registration_count: int = 0,
    checked_in_count: int = 0,
) -> TicketStats:
    """Aggregate an event's ticket types into inventory counters.

    ``registration_count`` counts confirmed and checked-in registrations,
    ``checked_in_count`` only checked-in ones. An event without ticket types
    has nothing left to sell and is reported as full.
    """
    total = 0
    available = 0
    for ticket_type in ticket_types:
        total += ticket_type["quantity"]
        available += ticket_type["available"]

    return TicketStats(
        total_tickets=total,
        available_tickets=available,
        sold_tickets=total - available,
        registration_count=registration_count,
        checked_in_count=checked_in_count,
        is_full=available == 0,
    )
