import os
import logging
import logging.handlers

import aiosqlite
import discord
from discord.ext import commands

import config
from database import DatabaseManager
from core.models import Character, Monster
from core.looting.reference import ReferenceData
from core.looting.service import LootingService
from core.looting.status import DatabaseStatusProvider


def setup_logging() -> logging.Logger:
    # Core modules log here too
    logger = logging.getLogger("discord_bot")
    logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

    fmt = logging.Formatter(
        "[{asctime}] [{levelname:<8}] {name}: {message}", "%Y-%m-%d %H:%M:%S", style="{"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(fmt)

    file_handler = logging.handlers.RotatingFileHandler(
        config.LOG_FILE, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setFormatter(fmt)

    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    return logger


class DiscordBot(commands.Bot):
    def __init__(self) -> None:
        intents = discord.Intents.default()
        super().__init__(command_prefix=commands.when_mentioned, intents=intents, help_command=None)
        self.logger = setup_logging()
        self.database = None
        self.looting = None
        self.blood_moon_active = config.BLOOD_MOON_ACTIVE

    async def init_db(self) -> None:
        connection = await aiosqlite.connect(config.DATABASE_PATH)
        self.database = DatabaseManager(connection=connection)
        await self.database.initialize()

    async def trigger_raid(self, character: Character, monster: Monster) -> None:
        self.logger.warning(f"Raid triggered by {character.name} in {character.current_village}: "
                            f"Tier {monster.tier} {monster.name}")

    async def load_cogs(self) -> None:
        for file in os.listdir(os.path.join(os.path.dirname(os.path.abspath(__file__)), "cogs")):
            if file.endswith(".py"):
                extension = file[:-3]
                try:
                    await self.load_extension(f"cogs.{extension}")
                    self.logger.info(f"Loaded extension '{extension}'")
                except Exception as e:
                    exception = f"{type(e).__name__}: {e}"
                    self.logger.error(f"Failed to load extension {extension}\n{exception}")

    async def setup_hook(self) -> None:
        self.logger.info(f"Logged in as {self.user}")
        await self.init_db()
        reference = ReferenceData.load()
        self.looting = LootingService(
            self.database,
            reference,
            status=DatabaseStatusProvider(self.database),
            raid_trigger=self.trigger_raid,
            no_encounter_chance=config.NO_ENCOUNTER_CHANCE,
        )
        await self.load_cogs()
        await self.tree.sync()

    async def close(self) -> None:
        if self.database is not None:
            await self.database.connection.close()
        await super().close()


if __name__ == "__main__":
    if not config.TOKEN:
        raise SystemExit("DISCORD_TOKEN is not set")
    bot = DiscordBot()
    bot.run(config.TOKEN, log_handler=None)
