import aiosqlite

from ticketing.registrations.models import RegistrationStatus


class RegistrationRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_with_event(self, registration_id: str) -> dict | None:
        cursor = await self._db.execute(
            """
            SELECT r.id, r.event_id, r.user_id, r.ticket_type_id, r.status,
                   r.checked_in_at, r.cancelled_at,
                   e.organizer_id AS event_organizer_id,
                   e.end_date AS event_end_date,
                   e.status AS event_status,
                   t.name AS ticket_type_name,
                   t.price AS ticket_type_price
            FROM registrations r
            JOIN events e ON e.id = r.event_id
            JOIN ticket_types t ON t.id = r.ticket_type_id
            WHERE r.id = ?
            """,
            (registration_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def get_for_check_in(self, registration_id: str, event_id: str) -> dict | None:
        cursor = await self._db.execute(
            """
            SELECT r.id, r.status, r.checked_in_at,
                   p.full_name AS attendee_name,
                   p.email AS attendee_email,
                   t.name AS ticket_type_name
            FROM registrations r
            JOIN profiles p ON p.id = r.user_id
            JOIN ticket_types t ON t.id = r.ticket_type_id
            WHERE r.id = ? AND r.event_id = ?
            """,
            (registration_id, event_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def find_active(self, event_id: str, user_id: str, ticket_type_id: str) -> dict | None:
        cursor = await self._db.execute(
            """
            SELECT id, status FROM registrations
            WHERE event_id = ? AND user_id = ? AND ticket_type_id = ? AND status != ?
            """,
            (event_id, user_id, ticket_type_id, RegistrationStatus.cancelled),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def count_active_for_event(self, event_id: str) -> int:
        cursor = await self._db.execute(
            "SELECT COUNT(*) AS total FROM registrations WHERE event_id = ? AND status != ?",
            (event_id, RegistrationStatus.cancelled),
        )
        row = await cursor.fetchone()
        return row["total"] if row else 0

    async def insert(self, registration: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO registrations (
                id, event_id, user_id, ticket_type_id, ticket_code, qr_data, status,
                created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                registration["id"],
                registration["event_id"],
                registration["user_id"],
                registration["ticket_type_id"],
                registration["ticket_code"],
                registration["qr_data"],
                registration["status"],
                registration["created_at"],
            ),
        )

    async def mark_cancelled(self, registration_id: str, cancelled_at: str) -> bool:
        cursor = await self._db.execute(
            """
            UPDATE registrations SET status = ?, cancelled_at = ?
            WHERE id = ? AND status = ?
            """,
            (
                RegistrationStatus.cancelled,
                cancelled_at,
                registration_id,
                RegistrationStatus.confirmed,
            ),
        )
        return cursor.rowcount == 1

    async def cancel_confirmed_for_event(self, event_id: str, cancelled_at: str) -> int:
        cursor = await self._db.execute(
            """
            UPDATE registrations SET status = ?, cancelled_at = ?
            WHERE event_id = ? AND status = ?
            """,
            (
                RegistrationStatus.cancelled,
                cancelled_at,
                event_id,
                RegistrationStatus.confirmed,
            ),
        )
        return cursor.rowcount

    async def mark_checked_in(self, registration_id: str, staff_id: str, checked_in_at: str) -> bool:
        cursor = await self._db.execute(
            """
            UPDATE registrations SET status = ?, checked_in_at = ?, checked_in_by = ?
            WHERE id = ? AND status = ?
            """,
            (
                RegistrationStatus.checked_in,
                checked_in_at,
                staff_id,
                registration_id,
                RegistrationStatus.confirmed,
            ),
        )
        return cursor.rowcount == 1

    async def list_for_user(
        self, user_id: str, status: RegistrationStatus | None = None
    ) -> list[dict]:
        params: list = [user_id]
        status_clause = ""
        if status is not None:
            status_clause = "AND r.status = ?"
            params.append(status)

        cursor = await self._db.execute(
            f"""
            SELECT r.id, r.event_id, r.ticket_type_id, r.ticket_code, r.qr_data, r.status,
                   r.checked_in_at, r.cancelled_at, r.created_at,
                   e.slug AS event_slug,
                   e.title AS event_title,
                   e.description AS event_description,
                   e.start_date AS event_start_date,
                   e.end_date AS event_end_date,
                   e.location AS event_location,
                   e.image_url AS event_image_url,
                   e.status AS event_status,
                   t.name AS ticket_type_name,
                   t.description AS ticket_type_description,
                   t.price AS ticket_type_price
            FROM registrations r
            JOIN events e ON e.id = r.event_id
            JOIN ticket_types t ON t.id = r.ticket_type_id
            WHERE r.user_id = ? {status_clause}
            ORDER BY r.created_at DESC, r.rowid DESC
            """,
            params,
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]
