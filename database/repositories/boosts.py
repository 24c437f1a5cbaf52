# database/repositories/boosts.py

import aiosqlite
from datetime import datetime
from typing import Optional

class BoostRepository:
    def __init__(self, connection: aiosqlite.Connection):
        self.connection = connection

    async def grant(self, character_id: int, booster_job: str, category: str = "Looting") -> None:
        """A character holds at most one boost per category; granting replaces it."""
        if not booster_job:
            raise ValueError("A boost needs a booster job")
        await self.connection.execute(
            """
            INSERT INTO boosts (character_id, category, booster_job, granted_at) VALUES (?, ?, ?, ?)
            ON CONFLICT (character_id, category)
            DO UPDATE SET booster_job = excluded.booster_job, granted_at = excluded.granted_at
            """,
            (character_id, category, booster_job, datetime.now().isoformat())
        )
        await self.connection.commit()

    async def get_active(self, character_id: int, category: str = "Looting") -> Optional[str]:
        async with self.connection.execute(
            "SELECT booster_job FROM boosts WHERE character_id = ? AND category = ?",
            (character_id, category)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def clear(self, character_id: int, category: str = "Looting") -> None:
        await self.connection.execute(
            "DELETE FROM boosts WHERE character_id = ? AND category = ?",
            (character_id, category)
        )
        await self.connection.commit()
