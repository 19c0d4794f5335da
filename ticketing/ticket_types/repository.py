from collections import defaultdict
from collections.abc import Sequence

import aiosqlite

_TICKET_TYPE_COLUMNS = (
    "id, event_id, name, description, price, quantity, available, created_at, updated_at"
)


class TicketTypeRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get(self, event_id: str, ticket_type_id: str) -> dict | None:
        cursor = await self._db.execute(
            f"SELECT {_TICKET_TYPE_COLUMNS} FROM ticket_types WHERE id = ? AND event_id = ?",
            (ticket_type_id, event_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def list_for_event(self, event_id: str) -> list[dict]:
        cursor = await self._db.execute(
            f"""
            SELECT {_TICKET_TYPE_COLUMNS} FROM ticket_types
            WHERE event_id = ?
            ORDER BY price ASC, created_at ASC
            """,
            (event_id,),
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    async def list_for_events(self, event_ids: Sequence[str]) -> dict[str, list[dict]]:
        """Ticket types for many events in one query, grouped by event id."""
        grouped: dict[str, list[dict]] = defaultdict(list)
        if not event_ids:
            return grouped

        placeholders = ", ".join("?" for _ in event_ids)
        cursor = await self._db.execute(
            f"""
            SELECT {_TICKET_TYPE_COLUMNS} FROM ticket_types
            WHERE event_id IN ({placeholders})
            ORDER BY price ASC, created_at ASC
            """,
            list(event_ids),
        )
        for row in await cursor.fetchall():
            grouped[row["event_id"]].append(dict(row))
        return grouped

    async def name_taken(self, event_id: str, name: str, exclude_id: str | None = None) -> bool:
        cursor = await self._db.execute(
            """
            SELECT 1 FROM ticket_types
            WHERE event_id = ? AND LOWER(name) = LOWER(?) AND id != COALESCE(?, '')
            """,
            (event_id, name, exclude_id),
        )
        return await cursor.fetchone() is not None

    async def total_quantity(self, event_id: str, exclude_id: str | None = None) -> int:
        cursor = await self._db.execute(
            """
            SELECT COALESCE(SUM(quantity), 0) AS total FROM ticket_types
            WHERE event_id = ? AND id != COALESCE(?, '')
            """,
            (event_id, exclude_id),
        )
        row = await cursor.fetchone()
        return row["total"] if row else 0

    async def count_for_event(self, event_id: str) -> int:
        cursor = await self._db.execute(
            "SELECT COUNT(*) AS total FROM ticket_types WHERE event_id = ?",
            (event_id,),
        )
        row = await cursor.fetchone()
        return row["total"] if row else 0

    async def count_registrations(self, ticket_type_id: str) -> int:
        cursor = await self._db.execute(
            "SELECT COUNT(*) AS total FROM registrations WHERE ticket_type_id = ?",
            (ticket_type_id,),
        )
        row = await cursor.fetchone()
        return row["total"] if row else 0

    async def insert(self, ticket_type: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO ticket_types (
                id, event_id, name, description, price, quantity, available,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                ticket_type["id"],
                ticket_type["event_id"],
                ticket_type["name"],
                ticket_type["description"],
                ticket_type["price"],
                ticket_type["quantity"],
                ticket_type["available"],
                ticket_type["created_at"],
                ticket_type["updated_at"],
            ),
        )

    async def update(self, ticket_type: dict) -> None:
        await self._db.execute(
            """
            UPDATE ticket_types
            SET name = ?, description = ?, price = ?, quantity = ?, available = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                ticket_type["name"],
                ticket_type["description"],
                ticket_type["price"],
                ticket_type["quantity"],
                ticket_type["available"],
                ticket_type["updated_at"],
                ticket_type["id"],
            ),
        )

    async def delete(self, ticket_type_id: str) -> None:
        await self._db.execute("DELETE FROM ticket_types WHERE id = ?", (ticket_type_id,))

    async def take_one(self, ticket_type_id: str, updated_at: str) -> bool:
        """Decrement availability unless sold out. Returns False when nothing was left."""
        cursor = await self._db.execute(
            """
            UPDATE ticket_types SET available = available - 1, updated_at = ?
            WHERE id = ? AND available > 0
            """,
            (updated_at, ticket_type_id),
        )
        return cursor.rowcount == 1

    async def release_one(self, ticket_type_id: str, updated_at: str) -> None:
        await self._db.execute(
            """
            UPDATE ticket_types SET available = MIN(available + 1, quantity), updated_at = ?
            WHERE id = ?
            """,
            (updated_at, ticket_type_id),
        )
