# database/repositories/inventory.py

import aiosqlite
from datetime import datetime
from typing import List, Tuple

class InventoryRepository:
    def __init__(self, connection: aiosqlite.Connection):
        self.connection = connection

    async def add_item(self, character_id: int, item_name: str, quantity: int, obtain: str = "Looting") -> None:
        """Adds to an existing stack, or starts a new one."""
        if quantity <= 0:
            raise ValueError("Quantity must be positive")
        await self.connection.execute(
            """
            INSERT INTO inventory (character_id, item_name, quantity, obtain, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (character_id, item_name)
            DO UPDATE SET quantity = quantity + excluded.quantity,
                          obtain = excluded.obtain,
                          updated_at = excluded.updated_at
            """,
            (character_id, item_name, quantity, obtain, datetime.now().isoformat())
        )
        await self.connection.commit()

    async def get_all(self, character_id: int) -> List[Tuple[str, int]]:
        async with self.connection.execute(
            "SELECT item_name, quantity FROM inventory WHERE character_id = ? ORDER BY item_name",
            (character_id,)
        ) as cursor:
            return [(row[0], row[1]) for row in await cursor.fetchall()]

    async def get_quantity(self, character_id: int, item_name: str) -> int:
        async with self.connection.execute(
            "SELECT quantity FROM inventory WHERE character_id = ? AND item_name = ?",
            (character_id, item_name)
        ) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else 0
