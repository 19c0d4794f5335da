"""Tests for the configure and delete ticket type commands."""

from ticketing.ticket_types.models import ConfigureTicketTypeInput
from ticketing.ticket_types.service import TicketTypeService

from tests.helpers import fetch_one, insert_event, insert_ticket_type, insert_user


def _input(event_id: str, organizer_id: str, **overrides) -> ConfigureTicketTypeInput:
    fields = {"name": "General Admission", "price": 25.0, "quantity": 40}
    fields.update(overrides)
    return ConfigureTicketTypeInput(event_id=event_id, organizer_id=organizer_id, **fields)


class TestConfigureTicketType:
    """Tests for TicketTypeService.configure_ticket_type."""

    async def test_creates_ticket_type(self, db) -> None:
        """A new ticket type starts fully available and is logged."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)

        result = await TicketTypeService(db).configure_ticket_type(_input(event_id, organizer))

        assert result.success
        assert result.data.available == 40
        logged = await fetch_one(
            db,
            "SELECT event_type FROM domain_events WHERE aggregate_id = ?",
            (result.data.ticket_type_id,),
        )
        assert logged == {"event_type": "ticket_type_configured"}

    async def test_unknown_event(self, db) -> None:
        """Configuring for a missing event fails with EVENT_NOT_FOUND."""
        organizer = await insert_user(db)
        result = await TicketTypeService(db).configure_ticket_type(
            _input("no-such-event", organizer)
        )
        assert result.error.code == "EVENT_NOT_FOUND"

    async def test_other_organizer_is_unauthorized(self, db) -> None:
        """Only the owning organizer may configure ticket types."""
        owner = await insert_user(db)
        intruder = await insert_user(db)
        event_id = await insert_event(db, owner)

        result = await TicketTypeService(db).configure_ticket_type(_input(event_id, intruder))
        assert result.error.code == "UNAUTHORIZED"

    async def test_admin_may_configure_any_event(self, db) -> None:
        """Admins bypass the ownership check."""
        owner = await insert_user(db)
        admin = await insert_user(db, role="admin")
        event_id = await insert_event(db, owner)

        result = await TicketTypeService(db).configure_ticket_type(_input(event_id, admin))
        assert result.success

    async def test_published_event_is_locked(self, db) -> None:
        """Ticket types only change while the event is a draft."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer, status="published")

        result = await TicketTypeService(db).configure_ticket_type(_input(event_id, organizer))
        assert result.error.code == "EVENT_ALREADY_PUBLISHED"

    async def test_duplicate_name_is_case_insensitive(self, db) -> None:
        """Names are unique per event regardless of case."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        await insert_ticket_type(db, event_id, name="VIP Pass")

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, name="vip pass")
        )
        assert result.error.code == "DUPLICATE_TICKET_TYPE"

    async def test_update_may_keep_its_own_name(self, db) -> None:
        """Renaming a ticket type to its current name is not a duplicate."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        ticket_type_id = await insert_ticket_type(db, event_id, name="VIP Pass", quantity=10)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(
                event_id, organizer, name="VIP Pass", quantity=15, ticket_type_id=ticket_type_id
            )
        )
        assert result.success
        assert result.data.quantity == 15

    async def test_update_keeps_sold_count(self, db) -> None:
        """Changing quantity moves availability by the same amount."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        ticket_type_id = await insert_ticket_type(db, event_id, quantity=10, available=4)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, quantity=20, ticket_type_id=ticket_type_id)
        )
        assert result.data.available == 14

    async def test_quantity_below_sold(self, db) -> None:
        """Quantity cannot drop under the number already sold."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        ticket_type_id = await insert_ticket_type(db, event_id, quantity=10, available=4)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, quantity=5, ticket_type_id=ticket_type_id)
        )
        assert result.error.code == "QUANTITY_BELOW_SOLD"

    async def test_update_of_unknown_ticket_type(self, db) -> None:
        """Updating a ticket type that is not part of the event fails."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, ticket_type_id="missing")
        )
        assert result.error.code == "TICKETTYPE_NOT_FOUND"

    async def test_total_quantity_within_capacity(self, db) -> None:
        """All ticket types together cannot exceed the event capacity."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer, capacity=50)
        await insert_ticket_type(db, event_id, name="Early Bird", quantity=30)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, quantity=21)
        )
        assert result.error.code == "EXCEEDS_CAPACITY"

    async def test_empty_id_creates(self, db) -> None:
        """An empty ticket_type_id is not an update."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        data = _input(event_id, organizer, ticket_type_id="")

        assert data.is_update is False
        result = await TicketTypeService(db).configure_ticket_type(data)
        assert result.success
        assert result.data.ticket_type_id

    async def test_invalid_input_is_a_validation_error(self, db) -> None:
        """Inputs that bypass the request schema are still checked."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)

        result = await TicketTypeService(db).configure_ticket_type(
            _input(event_id, organizer, name="  x ", price=-5)
        )
        assert result.error.code == "VALIDATION_ERROR"
        assert "Name must be at least 3 characters" in result.error.message


class TestDeleteTicketType:
    """Tests for TicketTypeService.delete_ticket_type."""

    async def test_deletes_unused_ticket_type(self, db) -> None:
        """A ticket type without registrations is removed."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)
        ticket_type_id = await insert_ticket_type(db, event_id)

        result = await TicketTypeService(db).delete_ticket_type(
            event_id, ticket_type_id, organizer
        )

        assert result.success
        row = await fetch_one(db, "SELECT id FROM ticket_types WHERE id = ?", (ticket_type_id,))
        assert row is None

    async def test_refuses_when_registrations_exist(self, db) -> None:
        """Ticket types with registrations stay."""
        organizer = await insert_user(db)
        attendee = await insert_user(db, role="attendee")
        event_id = await insert_event(db, organizer, status="published")
        ticket_type_id = await insert_ticket_type(db, event_id)
        await db.execute(
            """
            INSERT INTO registrations (
                id, event_id, user_id, ticket_type_id, ticket_code, qr_data, status, created_at
            ) VALUES ('r1', ?, ?, ?, 'TKT-1', 'qr-1', 'confirmed', '2026-01-01T00:00:00+00:00')
            """,
            (event_id, attendee, ticket_type_id),
        )
        await db.commit()

        result = await TicketTypeService(db).delete_ticket_type(
            event_id, ticket_type_id, organizer
        )
        assert result.error.code == "TICKET_TYPE_HAS_REGISTRATIONS"

    async def test_unknown_ticket_type(self, db) -> None:
        """Deleting a missing ticket type reports it as not found."""
        organizer = await insert_user(db)
        event_id = await insert_event(db, organizer)

        result = await TicketTypeService(db).delete_ticket_type(event_id, "missing", organizer)
        assert result.error.code == "TICKETTYPE_NOT_FOUND"
