"""API tests for configuring and deleting ticket types."""

import pytest
from fastapi.testclient import TestClient

from ticketing.commands import CommandError, CommandResult
from ticketing.dependencies import RequestContext, get_request_context, get_ticket_type_service
from ticketing.main import app
from ticketing.users.models import CurrentUser, UserRole

from tests.helpers import add_ticket_type, create_event, signup


class _RecordingService:
    """Stands in for TicketTypeService and remembers every call."""

    def __init__(self, result: CommandResult | None = None, exc: Exception | None = None):
        self.calls: list = []
        self._result = result
        self._exc = exc

    async def configure_ticket_type(self, data):
        self.calls.append(data)
        if self._exc is not None:
            raise self._exc
        return self._result


@pytest.fixture
def organizer(client) -> dict:
    return signup(client)


@pytest.fixture
def event(client, organizer) -> dict:
    return create_event(client, organizer["headers"])


def _override(service: _RecordingService) -> None:
    app.dependency_overrides[get_ticket_type_service] = lambda: service


class TestConfigureTicketTypeApi:
    """Tests for POST /api/events/{id}/ticket-types."""

    def test_create_returns_201(self, client, organizer, event) -> None:
        """Creating a ticket type answers 201 with the created message."""
        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "  Student  ", "price": 0, "quantity": 20, "description": "With ID"},
            headers=organizer["headers"],
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Ticket type created successfully"
        assert body["data"]["name"] == "Student"
        assert body["data"]["available"] == 20

    def test_update_returns_200(self, client, organizer, event) -> None:
        """Passing an existing id updates it and answers 200."""
        created = add_ticket_type(client, organizer["headers"], event["id"], quantity=10)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={
                "name": "General Admission",
                "price": 30,
                "quantity": 12,
                "ticketTypeId": created["ticketTypeId"],
            },
            headers=organizer["headers"],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Ticket type updated successfully"
        assert body["data"]["quantity"] == 12
        assert body["data"]["available"] == 12

    def test_blank_ticket_type_id_creates(self, client, organizer, event) -> None:
        """An empty ticketTypeId is treated as absent."""
        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5, "ticketTypeId": ""},
            headers=organizer["headers"],
        )

        assert response.status_code == 201
        assert response.json()["message"] == "Ticket type created successfully"
        assert response.json()["data"]["ticketTypeId"]

    def test_empty_body_lists_missing_fields(self, client, organizer, event) -> None:
        """Required fields are reported in declaration order."""
        response = client.post(
            f"/api/events/{event['id']}/ticket-types", json={}, headers=organizer["headers"]
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Missing required fields",
            "missingFields": ["name", "price", "quantity"],
        }

    def test_field_errors(self, client, organizer, event) -> None:
        """Out-of-range values come back as field errors."""
        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": -1, "quantity": 5},
            headers=organizer["headers"],
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert [error["field"] for error in body["fieldErrors"]] == ["price"]

    def test_malformed_json_skips_command(self, client, organizer, event) -> None:
        """Malformed JSON is a 400 and the command never runs."""
        service = _RecordingService()
        _override(service)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            content=b"{not json",
            headers={**organizer["headers"], "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON in request body"}
        assert service.calls == []

    def test_requires_session_before_reading_body(self, client, event) -> None:
        """Anonymous calls are a 401 and the command never runs."""
        service = _RecordingService()
        _override(service)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
        )

        assert response.status_code == 401
        assert response.json() == {"error": "Authentication required"}
        assert service.calls == []

    def test_passes_caller_and_path_to_command(self, client, organizer, event) -> None:
        """The command receives the path event id and the signed-in user."""
        service = _RecordingService(
            CommandResult.fail(CommandError(code="EXCEEDS_CAPACITY", message="Too many"))
        )
        _override(service)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
            headers=organizer["headers"],
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Too many", "code": "EXCEEDS_CAPACITY"}
        (data,) = service.calls
        assert data.event_id == event["id"]
        assert data.organizer_id == organizer["id"]
        assert data.is_update is False

    @pytest.mark.parametrize(
        ("code", "status_code"),
        [
            ("EVENT_NOT_FOUND", 404),
            ("UNAUTHORIZED", 403),
            ("DUPLICATE_TICKET_TYPE", 409),
            ("EVENT_ALREADY_PUBLISHED", 400),
            ("VALIDATION_ERROR", 400),
        ],
    )
    def test_failure_codes_map_to_status(
        self, client, organizer, event, code: str, status_code: int
    ) -> None:
        """Failed command results become HTTP errors."""
        _override(_RecordingService(CommandResult.fail(CommandError(code=code, message="No"))))

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
            headers=organizer["headers"],
        )

        assert response.status_code == status_code
        assert response.json()["code"] == code

    def test_unexpected_error_is_500(self, client, organizer, event) -> None:
        """Unhandled exceptions surface as a 500 with the error message."""
        _override(_RecordingService(exc=RuntimeError("disk on fire")))
        caller = CurrentUser(
            id=organizer["id"], email=organizer["email"], full_name="Ada", role=UserRole.organizer
        )
        app.dependency_overrides[get_request_context] = lambda: RequestContext(
            user=caller, db=None
        )
        unsafe_client = TestClient(app, raise_server_exceptions=False)

        response = unsafe_client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
            headers=organizer["headers"],
        )

        assert response.status_code == 500
        assert response.json() == {
            "error": "An unexpected error occurred",
            "message": "disk on fire",
        }

    def test_unexpected_error_keeps_cors_headers(self, client, organizer, event) -> None:
        """Browsers can read the 500 body from an allowed origin."""
        _override(_RecordingService(exc=RuntimeError("disk on fire")))

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
            headers={**organizer["headers"], "Origin": "http://localhost:3000"},
        )

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert response.json()["message"] == "disk on fire"

    def test_other_organizer_is_forbidden(self, client, event) -> None:
        """Only the owner configures ticket types."""
        intruder = signup(client)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 5},
            headers=intruder["headers"],
        )

        assert response.status_code == 403
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_exceeding_capacity(self, client, organizer) -> None:
        """The sum of quantities must fit the event capacity."""
        event = create_event(client, organizer["headers"], capacity=10)

        response = client.post(
            f"/api/events/{event['id']}/ticket-types",
            json={"name": "VIP", "price": 10, "quantity": 11},
            headers=organizer["headers"],
        )

        assert response.status_code == 400
        assert response.json()["code"] == "EXCEEDS_CAPACITY"


class TestDeleteTicketTypeApi:
    """Tests for DELETE /api/events/{id}/ticket-types/{ticket_type_id}."""

    def test_deletes(self, client, organizer, event) -> None:
        """Unused ticket types can be deleted."""
        created = add_ticket_type(client, organizer["headers"], event["id"])

        response = client.delete(
            f"/api/events/{event['id']}/ticket-types/{created['ticketTypeId']}",
            headers=organizer["headers"],
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Ticket type deleted successfully"

        detail = client.get(f"/api/events/{event['id']}", headers=organizer["headers"]).json()
        assert detail["data"]["ticketTypes"] == []
