import aiosqlite

from ticketing.events.models import UPDATABLE_FIELDS, EventStatus, EventWindow

_EVENT_COLUMNS = """
    e.id, e.organizer_id, e.title, e.slug, e.description, e.start_date, e.end_date,
    e.location, e.capacity, e.image_url, e.status, e.created_at, e.updated_at,
    e.published_at, e.cancelled_at, e.cancellation_reason
"""


class EventRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, event_id: str) -> dict | None:
        cursor = await self._db.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events e WHERE e.id = ?",
            (event_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def get_by_id_or_slug(self, key: str) -> dict | None:
        cursor = await self._db.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events e WHERE e.id = ? OR e.slug = ?",
            (key, key),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def slugs_like(self, base: str) -> set[str]:
        cursor = await self._db.execute(
            "SELECT slug FROM events WHERE slug = ? OR slug LIKE ?",
            (base, f"{base}-%"),
        )
        rows = await cursor.fetchall()
        return {row["slug"] for row in rows}

    async def insert(self, event: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO events (
                id, organizer_id, title, slug, description, start_date, end_date,
                location, capacity, image_url, status, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event["id"],
                event["organizer_id"],
                event["title"],
                event["slug"],
                event["description"],
                event["start_date"],
                event["end_date"],
                event["location"],
                event["capacity"],
                event["image_url"],
                event["status"],
                event["created_at"],
                event["updated_at"],
            ),
        )

    async def update(self, event_id: str, changes: dict, updated_at: str) -> None:
        columns = [column for column in UPDATABLE_FIELDS if column in changes]
        assignments = ", ".join(f"{column} = ?" for column in columns)
        await self._db.execute(
            f"UPDATE events SET {assignments}, updated_at = ? WHERE id = ?",
            [*(changes[column] for column in columns), updated_at, event_id],
        )

    async def mark_published(self, event_id: str, published_at: str) -> None:
        await self._db.execute(
            """
            UPDATE events SET status = ?, published_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (EventStatus.published, published_at, published_at, event_id),
        )

    async def mark_cancelled(self, event_id: str, reason: str, cancelled_at: str) -> None:
        await self._db.execute(
            """
            UPDATE events
            SET status = ?, cancelled_at = ?, cancellation_reason = ?, updated_at = ?
            WHERE id = ?
            """,
            (EventStatus.cancelled, cancelled_at, reason, cancelled_at, event_id),
        )

    def _published_filters(
        self, window: EventWindow | None, search: str | None, now: str
    ) -> tuple[str, list]:
        clauses = ["e.status = ?"]
        params: list = [EventStatus.published]

        if window == EventWindow.upcoming:
            clauses.append("e.start_date > ?")
            params.append(now)
        elif window == EventWindow.ongoing:
            clauses.append("e.start_date <= ? AND e.end_date >= ?")
            params.extend([now, now])
        elif window == EventWindow.past:
            clauses.append("e.end_date < ?")
            params.append(now)

        if search:
            clauses.append("(e.title LIKE ? OR e.description LIKE ?)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern])

        return " AND ".join(clauses), params

    async def list_published(
        self,
        window: EventWindow | None,
        search: str | None,
        now: str,
        limit: int,
        offset: int,
    ) -> list[dict]:
        where, params = self._published_filters(window, search, now)
        order = "DESC" if window == EventWindow.past else "ASC"
        cursor = await self._db.execute(
            f"""
            SELECT {_EVENT_COLUMNS}
            FROM events e
            WHERE {where}
            ORDER BY e.start_date {order}
            LIMIT ? OFFSET ?
            """,
            [*params, limit, offset],
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def count_published(
        self, window: EventWindow | None, search: str | None, now: str
    ) -> int:
        where, params = self._published_filters(window, search, now)
        cursor = await self._db.execute(
            f"SELECT COUNT(*) AS total FROM events e WHERE {where}",
            params,
        )
        row = await cursor.fetchone()
        return row["total"] if row else 0

    async def list_for_organizer(
        self, organizer_id: str, status: EventStatus | None = None
    ) -> list[dict]:
        """Organizer's events, newest first, with registration counters attached."""
        params: list = [organizer_id]
        status_clause = ""
        if status is not None:
            status_clause = "AND e.status = ?"
            params.append(status)

        cursor = await self._db.execute(
            f"""
            SELECT {_EVENT_COLUMNS},
                   COALESCE(r.registration_count, 0) AS registration_count,
                   COALESCE(r.checked_in_count, 0) AS checked_in_count
            FROM events e
            LEFT JOIN (
                SELECT event_id,
                       SUM(CASE WHEN status IN ('confirmed', 'checked_in') THEN 1 ELSE 0 END)
                           AS registration_count,
                       SUM(CASE WHEN status = 'checked_in' THEN 1 ELSE 0 END)
                           AS checked_in_count
                FROM registrations
                GROUP BY event_id
            ) r ON r.event_id = e.id
            WHERE e.organizer_id = ? {status_clause}
            ORDER BY e.created_at DESC, e.rowid DESC
            """,
            params,
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def registration_counts(self, event_id: str) -> tuple[int, int]:
        cursor = await self._db.execute(
            """
            SELECT
                COALESCE(SUM(CASE WHEN status IN ('confirmed', 'checked_in') THEN 1 ELSE 0 END), 0)
                    AS registration_count,
                COALESCE(SUM(CASE WHEN status = 'checked_in' THEN 1 ELSE 0 END), 0)
                    AS checked_in_count
            FROM registrations
            WHERE event_id = ?
            """,
            (event_id,),
        )
        row = await cursor.fetchone()
        return row["registration_count"], row["checked_in_count"]

    async def is_staff_assigned(self, event_id: str, staff_id: str) -> bool:
        cursor = await self._db.execute(
            "SELECT 1 FROM staff_assignments WHERE event_id = ? AND staff_id = ?",
            (event_id, staff_id),
        )
        return await cursor.fetchone() is not None

    async def insert_staff_assignment(self, assignment: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO staff_assignments (id, event_id, staff_id, assigned_by, role, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                assignment["id"],
                assignment["event_id"],
                assignment["staff_id"],
                assignment["assigned_by"],
                assignment["role"],
                assignment["created_at"],
            ),
        )
