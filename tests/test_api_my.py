"""API tests for the signed-in user's own events and registrations."""

from tests.helpers import create_event, execute_sql, published_event, register, signup


class TestMyEventsApi:
    """Tests for GET /api/my/events."""

    def test_lists_own_events_with_stats(self, client) -> None:
        """Organizers see their drafts and published events with counters."""
        organizer = signup(client)
        attendee = signup(client, role="attendee")
        event, ticket_type = published_event(client, organizer["headers"])
        draft = create_event(client, organizer["headers"], title="Upcoming Draft Event")
        register(client, attendee["headers"], event["id"], ticket_type["ticketTypeId"])
        create_event(client, signup(client)["headers"])

        response = client.get("/api/my/events", headers=organizer["headers"])

        assert response.status_code == 200
        events = {item["id"]: item for item in response.json()["data"]}
        assert set(events) == {event["id"], draft["id"]}
        stats = events[event["id"]]["stats"]
        assert stats["registrationCount"] == 1
        assert stats["availableTickets"] == 49
        assert events[draft["id"]]["stats"]["isFull"] is True

    def test_status_filter(self, client) -> None:
        """A known status narrows the list, an unknown one is ignored."""
        organizer = signup(client)
        published, _ = published_event(client, organizer["headers"])
        create_event(client, organizer["headers"])

        filtered = client.get(
            "/api/my/events", params={"status": "published"}, headers=organizer["headers"]
        ).json()["data"]
        assert [item["id"] for item in filtered] == [published["id"]]

        unfiltered = client.get(
            "/api/my/events", params={"status": "bogus"}, headers=organizer["headers"]
        ).json()["data"]
        assert len(unfiltered) == 2

    def test_newest_first(self, client, db_path) -> None:
        """Events are ordered by creation time, newest first."""
        organizer = signup(client)
        first = create_event(client, organizer["headers"], title="First Listed Event")
        second = create_event(client, organizer["headers"], title="Second Listed Event")
        third = create_event(client, organizer["headers"], title="Third Listed Event")
        execute_sql(
            db_path,
            "UPDATE events SET created_at = ? WHERE id = ?",
            ("2020-01-01T00:00:00+00:00", third["id"]),
        )

        response = client.get("/api/my/events", headers=organizer["headers"])

        assert [item["id"] for item in response.json()["data"]] == [
            second["id"],
            first["id"],
            third["id"],
        ]

    def test_requires_session(self, client) -> None:
        """Anonymous callers are rejected."""
        assert client.get("/api/my/events").status_code == 401


class TestMyRegistrationsApi:
    """Tests for GET /api/my/registrations."""

    def test_lists_registrations_with_event(self, client) -> None:
        """Registrations embed their event and ticket type."""
        organizer = signup(client)
        attendee = signup(client, role="attendee")
        event, ticket_type = published_event(client, organizer["headers"])
        ticket = register(client, attendee["headers"], event["id"], ticket_type["ticketTypeId"])

        response = client.get("/api/my/registrations", headers=attendee["headers"])

        assert response.status_code == 200
        (item,) = response.json()["data"]
        assert item["id"] == ticket["registrationId"]
        assert item["event"]["slug"] == event["slug"]
        assert item["ticketType"]["price"] == 25.0

    def test_newest_first(self, client, db_path) -> None:
        """Registrations are ordered by creation time, newest first."""
        organizer = signup(client)
        attendee = signup(client, role="attendee")
        tickets = []
        for title in ("Morning Python Session", "Evening Python Session", "Late Python Session"):
            event, ticket_type = published_event(client, organizer["headers"], title=title)
            tickets.append(
                register(client, attendee["headers"], event["id"], ticket_type["ticketTypeId"])
            )
        execute_sql(
            db_path,
            "UPDATE registrations SET created_at = ? WHERE id = ?",
            ("2020-01-01T00:00:00+00:00", tickets[2]["registrationId"]),
        )

        response = client.get("/api/my/registrations", headers=attendee["headers"])

        assert [item["id"] for item in response.json()["data"]] == [
            tickets[1]["registrationId"],
            tickets[0]["registrationId"],
            tickets[2]["registrationId"],
        ]

    def test_unknown_status_is_ignored(self, client) -> None:
        """An unrecognised status returns everything."""
        organizer = signup(client)
        attendee = signup(client, role="attendee")
        event, ticket_type = published_event(client, organizer["headers"])
        register(client, attendee["headers"], event["id"], ticket_type["ticketTypeId"])

        response = client.get(
            "/api/my/registrations", params={"status": "whatever"}, headers=attendee["headers"]
        )
        assert len(response.json()["data"]) == 1
