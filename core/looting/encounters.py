import random
import logging
from typing import Dict, List, Optional, Sequence

from core.models import Monster, EncounterKind, EncounterSelection, normalize_key

logger = logging.getLogger("discord_bot")

VILLAGE_REGIONS: Dict[str, str] = {
    "rudania": "Eldin",
    "inariko": "Lanayru",
    "vhintl": "Faron",
}

# Jobs carrying the looting perk
LOOTING_JOBS = frozenset(normalize_key(job) for job in (
    "Adventurer", "Beekeeper", "Farmer", "Fisherman", "Graveskeeper",
    "Guard", "Hunter", "Mercenary", "Scout",
))

# Blood Moon: "no encounter" and each of tiers 1-10 are equally likely
BLOOD_MOON_TIER_WEIGHTS: Dict[int, int] = {0: 10, **{tier: 10 for tier in range(1, 11)}}
BLOOD_MOON_MAX_REROLLS = 5
RAID_TIER_THRESHOLD = 4 # tiers above this become raids


class EncounterManager:
    @staticmethod
    def has_looting_perk(job: Optional[str]) -> bool:
        return normalize_key(job) in LOOTING_JOBS

    @staticmethod
    def region_for_village(village: str) -> Optional[str]:
        return VILLAGE_REGIONS.get(normalize_key(village))

    @staticmethod
    def filter_monsters(region: str, job: str, pool: Sequence[Monster]) -> List[Monster]:
        return [m for m in pool if m.is_eligible(region, job)]

    @staticmethod
    def select_encounter(region: str, job: str, pool: Sequence[Monster],
                         blood_moon: bool = False, no_encounter_chance: int = 20,
                         rng=random) -> EncounterSelection:
        """
        Decides whether anything shows up, and what.
        Pure: only reads the supplied pool.
        """
        eligible = EncounterManager.filter_monsters(region, job, pool)
        if not eligible:
            return EncounterSelection.none()

        if blood_moon:
            return EncounterManager._select_blood_moon(eligible, rng)

        if rng.random() * 100 < no_encounter_chance:
            return EncounterSelection.none()

        monster = rng.choice(eligible)
        return EncounterSelection(kind=EncounterKind.MONSTER, monster=monster, tier=monster.tier)

    @staticmethod
    def draw_blood_moon_tier(rng=random) -> int:
        """Returns 0 for no encounter, otherwise a tier 1-10."""
        tiers = list(BLOOD_MOON_TIER_WEIGHTS.keys())
        weights = list(BLOOD_MOON_TIER_WEIGHTS.values())
        return rng.choices(tiers, weights=weights, k=1)[0]

    @staticmethod
    def _select_blood_moon(eligible: List[Monster], rng) -> EncounterSelection:
        tier = EncounterManager.draw_blood_moon_tier(rng)
        if tier == 0:
            return EncounterSelection.none()

        candidates = [m for m in eligible if m.tier == tier]
        rerolls = 0
        while not candidates and rerolls < BLOOD_MOON_MAX_REROLLS:
            tier = rng.randint(1, 10)
            candidates = [m for m in eligible if m.tier == tier]
            rerolls += 1

        if not candidates:
            logger.info(f"Blood Moon: no monsters found after {rerolls} rerolls")
            return EncounterSelection.none()

        monster = rng.choice(candidates)
        if monster.tier > RAID_TIER_THRESHOLD:
            logger.info(f"Blood Moon: tier {monster.tier} {monster.name} triggers a raid")
            return EncounterSelection(kind=EncounterKind.RAID, monster=monster, tier=monster.tier)
        return EncounterSelection(kind=EncounterKind.MONSTER, monster=monster, tier=monster.tier)
