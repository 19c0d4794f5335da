"""Seed data for service and API tests."""

import sqlite3
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import aiosqlite
from fastapi.testclient import TestClient


def iso_in(**delta) -> str:
    return (datetime.now(UTC) + timedelta(**delta)).isoformat()


# --- direct database seeding (service tests) ---


async def insert_user(
    db: aiosqlite.Connection, role: str = "organizer", full_name: str = "Test User"
) -> str:
    user_id = str(uuid4())
    now = datetime.now(UTC).isoformat()
    await db.execute(
        """
        INSERT INTO profiles (id, email, full_name, password_hash, role, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (user_id, f"{user_id}@example.com", full_name, "not-a-real-hash", role, now, now),
    )
    await db.commit()
    return user_id


async def insert_event(
    db: aiosqlite.Connection,
    organizer_id: str,
    status: str = "draft",
    start_date: str | None = None,
    end_date: str | None = None,
    capacity: int = 100,
    description: str | None = "A day of talks and workshops",
) -> str:
    event_id = str(uuid4())
    now = datetime.now(UTC).isoformat()
    await db.execute(
        """
        INSERT INTO events (
            id, organizer_id, title, slug, description, start_date, end_date,
            location, capacity, status, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            event_id,
            organizer_id,
            "Python Meetup",
            f"python-meetup-{event_id[:8]}",
            description,
            start_date or iso_in(days=7),
            end_date or iso_in(days=7, hours=3),
            "Main Hall",
            capacity,
            status,
            now,
            now,
        ),
    )
    await db.commit()
    return event_id


async def insert_ticket_type(
    db: aiosqlite.Connection,
    event_id: str,
    name: str = "General Admission",
    quantity: int = 10,
    available: int | None = None,
    price: float = 25.0,
) -> str:
    ticket_type_id = str(uuid4())
    now = datetime.now(UTC).isoformat()
    await db.execute(
        """
        INSERT INTO ticket_types (
            id, event_id, name, description, price, quantity, available, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            ticket_type_id,
            event_id,
            name,
            None,
            price,
            quantity,
            quantity if available is None else available,
            now,
            now,
        ),
    )
    await db.commit()
    return ticket_type_id


async def fetch_one(db: aiosqlite.Connection, sql: str, params: tuple = ()) -> dict | None:
    cursor = await db.execute(sql, params)
    row = await cursor.fetchone()
    return dict(row) if row else None


# --- HTTP helpers (API tests) ---


def execute_sql(db_path: str, sql: str, params: tuple = ()) -> None:
    """Write straight to the app database, for states the API cannot reach."""
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(sql, params)
        conn.commit()
    finally:
        conn.close()


def signup(client: TestClient, role: str = "organizer", full_name: str = "Ada Lovelace") -> dict:
    email = f"{uuid4().hex[:12]}@example.com"
    password = "correct-horse-battery"
    response = client.post(
        "/api/auth/signup",
        json={"email": email, "password": password, "fullName": full_name, "role": role},
    )
    assert response.status_code == 201, response.text
    profile = response.json()["data"]

    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["accessToken"]
    return {
        "id": profile["id"],
        "email": email,
        "password": password,
        "headers": {"Authorization": f"Bearer {token}"},
    }


def create_event(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {
        "title": "PyCon Workshop Day",
        "description": "Hands-on sessions for Python developers",
        "startDate": iso_in(days=7),
        "endDate": iso_in(days=7, hours=6),
        "location": "Conference Centre",
        "capacity": 100,
    }
    payload.update(overrides)
    response = client.post("/api/events", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def add_ticket_type(
    client: TestClient,
    headers: dict,
    event_id: str,
    name: str = "General Admission",
    price: float = 25.0,
    quantity: int = 50,
) -> dict:
    response = client.post(
        f"/api/events/{event_id}/ticket-types",
        json={"name": name, "price": price, "quantity": quantity},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def publish(client: TestClient, headers: dict, event_id: str) -> None:
    response = client.post(f"/api/events/{event_id}/publish", headers=headers)
    assert response.status_code == 200, response.text


def register(client: TestClient, headers: dict, event_id: str, ticket_type_id: str) -> dict:
    response = client.post(
        f"/api/events/{event_id}/register",
        json={"ticketTypeId": ticket_type_id},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


def published_event(client: TestClient, headers: dict, **overrides) -> tuple[dict, dict]:
    """Create and publish an event with one ticket type."""
    event = create_event(client, headers, **overrides)
    ticket_type = add_ticket_type(client, headers, event["id"])
    publish(client, headers, event["id"])
    return event, ticket_type
