import logging
from typing import Dict

from core.models import Boost, Character, normalize_key

logger = logging.getLogger("discord_bot")

# Booster job -> what their Looting boost does
BOOSTER_EFFECTS: Dict[str, Dict] = {
    "teacher": {"roll_multiplier": 1.2},
    "fortuneteller": {"fated_reroll": True},
    "priest": {"divine_blessing": True},
    "entertainer": {"damage_reduction": True},
    "scholar": {"double_haul": True},
}


def boost_for_job(booster_job: str, category: str = "Looting") -> Boost:
    effects = BOOSTER_EFFECTS.get(normalize_key(booster_job), {})
    return Boost(booster_job=booster_job, category=category, **effects)


class StatusProvider:
    """No boosts for anyone. Subclass, or hand in a fake for tests."""

    async def get_boost(self, character: Character) -> Boost:
        return Boost()

    async def mark_boost_used(self, character: Character) -> None:
        return None


class DatabaseStatusProvider(StatusProvider):
    def __init__(self, database, category: str = "Looting"):
        self.database = database
        self.category = category

    async def get_boost(self, character: Character) -> Boost:
        booster_job = await self.database.boosts.get_active(character.id, self.category)
        if not booster_job:
            return Boost()
        boost = boost_for_job(booster_job, self.category)
        logger.info(f"{character.name} is boosted by a {booster_job} for {self.category}")
        return boost

    async def mark_boost_used(self, character: Character) -> None:
        await self.database.boosts.clear(character.id, self.category)
