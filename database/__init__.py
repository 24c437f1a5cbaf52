import os
import aiosqlite

from database.repositories.characters import CharacterRepository
from database.repositories.inventory import InventoryRepository
from database.repositories.villages import VillageRepository
from database.repositories.boosts import BoostRepository

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), 'schema.sql')

class DatabaseManager:
    def __init__(self, *, connection: aiosqlite.Connection) -> None:
        self.connection = connection
        self.characters = CharacterRepository(connection)
        self.inventory = InventoryRepository(connection)
        self.villages = VillageRepository(connection)
        self.boosts = BoostRepository(connection)

    async def initialize(self) -> None:
        """Creates any missing tables."""
        with open(SCHEMA_PATH, "r") as f:
            await self.connection.executescript(f.read())
        await self.connection.commit()
