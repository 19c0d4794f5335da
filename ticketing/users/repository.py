import aiosqlite


class UserRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def get_by_id(self, user_id: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT id, email, full_name, role, created_at FROM profiles WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def get_credentials(self, email: str) -> dict | None:
        cursor = await self._db.execute(
            "SELECT id, email, full_name, role, password_hash FROM profiles WHERE email = ?",
            (email,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return dict(row)

    async def email_exists(self, email: str) -> bool:
        cursor = await self._db.execute("SELECT 1 FROM profiles WHERE email = ?", (email,))
        return await cursor.fetchone() is not None

    async def get_role(self, user_id: str) -> str | None:
        cursor = await self._db.execute("SELECT role FROM profiles WHERE id = ?", (user_id,))
        row = await cursor.fetchone()
        return row["role"] if row else None

    async def insert(self, profile: dict) -> None:
        await self._db.execute(
            """
            INSERT INTO profiles (
                id, email, full_name, password_hash, role, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                profile["id"],
                profile["email"],
                profile["full_name"],
                profile["password_hash"],
                profile["role"],
                profile["created_at"],
                profile["updated_at"],
            ),
        )
