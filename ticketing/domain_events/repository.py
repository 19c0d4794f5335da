import json

import aiosqlite


class DomainEventRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def append(
        self,
        event_id: str,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
        created_at: str,
    ) -> int:
        """Insert the next event of an aggregate and return its version."""
        await self._db.execute(
            """
            INSERT INTO domain_events (
                event_id, aggregate_type, aggregate_id, event_type,
                payload, version, created_at
            )
            SELECT ?, ?, ?, ?, ?, COALESCE(MAX(version), 0) + 1, ?
            FROM domain_events
            WHERE aggregate_id = ?
            """,
            (
                event_id,
                aggregate_type,
                aggregate_id,
                event_type,
                json.dumps(payload, default=str),
                created_at,
                aggregate_id,
            ),
        )
        cursor = await self._db.execute(
            "SELECT version FROM domain_events WHERE event_id = ?", (event_id,)
        )
        row = await cursor.fetchone()
        return row["version"]
