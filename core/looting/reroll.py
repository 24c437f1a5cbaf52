import random
import logging
from typing import Optional, Tuple

from core.models import Boost, Character, Monster, EncounterOutcome
from core.looting.rolls import roll_d100, adjust_roll
from core.looting.outcomes import OutcomeTable, DEFAULT_TABLE, compute_outcome

logger = logging.getLogger("discord_bot")


def pick_better(original: EncounterOutcome, reroll: EncounterOutcome) -> Tuple[EncounterOutcome, bool]:
    """Less damage wins, then the higher roll. Returns (chosen, reroll_kept)."""
    if reroll.hearts_lost < original.hearts_lost:
        return reroll, True
    if reroll.hearts_lost == original.hearts_lost and reroll.roll > original.roll:
        return reroll, True
    return original, False


def maybe_reroll(character: Character, monster: Monster, original: EncounterOutcome,
                 village_level: int = 1, boost: Optional[Boost] = None,
                 table: OutcomeTable = DEFAULT_TABLE,
                 rng=random) -> Tuple[EncounterOutcome, Optional[EncounterOutcome]]:
    """
    Fated Reroll: when the boost grants it and the first pass hurt,
    resolve the whole encounter again and keep the better result.
    Neither pass has been applied yet, so the caller applies the choice once.
    """
    if boost is None or not boost.fated_reroll or original.hearts_lost <= 0:
        return original, None

    logger.info(f"Fated Reroll triggered for {character.name} (damage={original.hearts_lost})")
    trail = adjust_roll(roll_d100(rng), character, village_level, boost, rng)
    reroll = compute_outcome(character, monster, trail, village_level, table, rng, boost=boost)

    chosen, kept = pick_better(original, reroll)
    if kept:
        logger.info(f"Fated Reroll improved outcome for {character.name}: "
                    f"damage {original.hearts_lost} -> {reroll.hearts_lost}, roll {original.roll} -> {reroll.roll}")
    else:
        logger.info(f"Fated Reroll did not improve outcome for {character.name}; keeping original")
    return chosen, reroll
