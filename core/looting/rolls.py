import random
import logging
from typing import Optional

from core.models import Boost, Character, RollTrail
from core.looting.elixirs import get_active_buff_effects

logger = logging.getLogger("discord_bot")

MIN_ROLL = 1
MAX_ROLL = 100

# Village level -> inclusive bonus range added to the base roll
VILLAGE_ROLL_BONUS = {2: (1, 3), 3: (3, 5)}

# Blight stage -> roll multiplier. Always < 1.
BLIGHT_ROLL_PENALTY = {1: 0.75}
BLIGHT_ROLL_PENALTY_SEVERE = 0.5

ELIXIR_ROLL_POINTS = 5  # per point of stealth/speed boost


def clamp_roll(value: int) -> int:
    return max(MIN_ROLL, min(MAX_ROLL, int(value)))


def roll_d100(rng=random) -> int:
    return rng.randint(MIN_ROLL, MAX_ROLL)


def village_roll_bonus(village_level: int, rng=random) -> int:
    bounds = VILLAGE_ROLL_BONUS.get(min(village_level, 3))
    if not bounds:
        return 0
    return rng.randint(*bounds)


def blight_multiplier(character: Character) -> float:
    if not character.blighted:
        return 1.0
    return BLIGHT_ROLL_PENALTY.get(max(1, character.blight_stage), BLIGHT_ROLL_PENALTY_SEVERE)


def elixir_roll_bonus(character: Character) -> int:
    effects = get_active_buff_effects(character)
    if not effects:
        return 0
    points = effects.get("stealthBoost", 0) + effects.get("speedBoost", 0)
    return int(points * ELIXIR_ROLL_POINTS)


def adjust_roll(base_roll: int, character: Character, village_level: int = 1,
                boost: Optional[Boost] = None, rng=random) -> RollTrail:
    """
    Applies roll modifiers in a fixed order:
    village bonus, blight penalty, elixir bonus, boost, clamp.
    """
    base = clamp_roll(base_roll)

    after_location = clamp_roll(base + village_roll_bonus(village_level, rng))
    if after_location > base:
        logger.info(f"Village level {village_level} bonus for {character.name}: {base} -> {after_location}")

    after_status = clamp_roll(after_location * blight_multiplier(character))
    if after_status < after_location:
        logger.info(f"Blight penalty for {character.name}: {after_location} -> {after_status}")

    after_elixir = clamp_roll(after_status + elixir_roll_bonus(character))

    final = after_elixir
    if boost is not None and boost.active:
        final = clamp_roll(boost.adjust_roll(after_elixir))
        if final != after_elixir:
            logger.info(f"{boost.booster_job} boost for {character.name}: {after_elixir} -> {final}")

    return RollTrail(
        base=base,
        after_location=after_location,
        after_status=after_status,
        after_elixir=after_elixir,
        final=final,
    )
