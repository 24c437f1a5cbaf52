# database/repositories/villages.py

import aiosqlite

MAX_VILLAGE_LEVEL = 3

class VillageRepository:
    def __init__(self, connection: aiosqlite.Connection):
        self.connection = connection

    async def get_level(self, village: str) -> int:
        """Villages nobody has upgraded yet are level 1."""
        async with self.connection.execute(
            "SELECT level FROM villages WHERE LOWER(name) = LOWER(?)", (village,)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else 1

    async def set_level(self, village: str, level: int) -> None:
        if not 1 <= level <= MAX_VILLAGE_LEVEL:
            raise ValueError(f"Village level must be between 1 and {MAX_VILLAGE_LEVEL}")
        await self.connection.execute(
            """
            INSERT INTO villages (name, level) VALUES (?, ?)
            ON CONFLICT (name) DO UPDATE SET level = excluded.level
            """,
            (village.lower(), level)
        )
        await self.connection.commit()
