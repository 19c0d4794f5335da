import json

import aiosqlite


class CheckInRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def insert(self, check_in: dict) -> None:
        device_info = check_in["device_info"]
        await self._db.execute(
            """
            INSERT INTO check_ins (
                id, registration_id, staff_id, method, location, device_info, timestamp
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                check_in["id"],
                check_in["registration_id"],
                check_in["staff_id"],
                check_in["method"],
                check_in["location"],
                json.dumps(device_info) if device_info is not None else None,
                check_in["timestamp"],
            ),
        )

    async def list_for_registration(self, registration_id: str) -> list[dict]:
        cursor = await self._db.execute(
            """
            SELECT id, registration_id, staff_id, method, location, device_info, timestamp
            FROM check_ins
            WHERE registration_id = ?
            ORDER BY timestamp ASC
            """,
            (registration_id,),
        )
        rows = await cursor.fetchall()
        results = []
        for row in rows:
            item = dict(row)
            if item["device_info"]:
                item["device_info"] = json.loads(item["device_info"])
            results.append(item)
        return results
