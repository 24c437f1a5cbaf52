import math
import random
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from core.models import Boost, Character, Monster, EncounterOutcome, OutcomeKind, RollTrail
from core.looting.errors import HeartsReconciliationError

logger = logging.getLogger("discord_bot")


@dataclass(frozen=True)
class OutcomeTable:
    """Game-balance knobs for resolving one encounter."""
    # (highest roll in band, hearts subtracted from the monster tier)
    damage_bands: Tuple[Tuple[int, int], ...] = ((25, 0), (50, 1), (75, 2))

    attack_base: int = 90
    defense_base: int = 92
    tier_weight: int = 2
    monster_stat_weight: int = 2
    attack_weight: int = 4
    defense_weight: int = 3
    defense_multiplier: float = 1.5

DEFAULT_TABLE = OutcomeTable()

# Village level -> (min, max) fraction of damage prevented
VILLAGE_DAMAGE_REDUCTION = {2: (0.05, 0.10), 3: (0.10, 0.15)}


def attack_threshold(character: Character, monster: Monster, table: OutcomeTable = DEFAULT_TABLE) -> int:
    return (table.attack_base
            + monster.tier * table.tier_weight
            + monster.defense * table.monster_stat_weight
            - character.get_total_attack() * table.attack_weight)


def defense_threshold(character: Character, monster: Monster, table: OutcomeTable = DEFAULT_TABLE) -> int:
    effective_defense = int(character.get_total_defense() * table.defense_multiplier)
    return (table.defense_base
            + monster.tier * table.tier_weight
            + monster.attack * table.monster_stat_weight
            - effective_defense * table.defense_weight)


def check_attack(character: Character, monster: Monster, roll: int, table: OutcomeTable = DEFAULT_TABLE) -> bool:
    return character.get_total_attack() > 0 and roll >= attack_threshold(character, monster, table)


def check_defense(character: Character, monster: Monster, roll: int, table: OutcomeTable = DEFAULT_TABLE) -> bool:
    return character.get_total_defense() > 0 and roll >= defense_threshold(character, monster, table)


def base_damage(tier: int, roll: int, table: OutcomeTable = DEFAULT_TABLE) -> int:
    for highest_roll, reduction in table.damage_bands:
        if roll <= highest_roll:
            return max(0, tier - reduction)
    return 0


def reduce_damage_for_village(damage: int, village_level: int, rng=random) -> int:
    bounds = VILLAGE_DAMAGE_REDUCTION.get(min(village_level, 3))
    if damage <= 0 or not bounds:
        return damage
    reduction = rng.uniform(*bounds)
    return max(1, math.floor(damage * (1 - reduction)))


def boost_damage_reduction(tier: int, boost: Optional[Boost]) -> int:
    """Requiem of Spirit: one heart off per two monster tiers, rounded up."""
    if boost is None or not boost.active or not boost.damage_reduction:
        return 0
    return math.ceil(tier / 2)


def compute_outcome(character: Character, monster: Monster, roll, village_level: int = 1,
                    table: OutcomeTable = DEFAULT_TABLE, rng=random,
                    boost: Optional[Boost] = None) -> EncounterOutcome:
    """
    Resolves one encounter without touching any state.
    `roll` is the final adjusted roll, or the RollTrail that produced it.
    """
    trail = roll if isinstance(roll, RollTrail) else None
    final_roll = trail.final if trail else int(roll)

    if character.immune:
        outcome = EncounterOutcome.victory(final_roll)
        outcome.trail = trail
        return outcome

    attack_success = check_attack(character, monster, final_roll, table)
    defense_success = check_defense(character, monster, final_roll, table)

    # First match wins
    if defense_success:
        outcome = EncounterOutcome.victory(final_roll, attack_success, defense_success)
    elif attack_success:
        outcome = EncounterOutcome.victory(final_roll, attack_success, defense_success)
    else:
        damage = base_damage(monster.tier, final_roll, table)
        if damage > 0:
            after_village = reduce_damage_for_village(damage, village_level, rng)
            reduced = max(0, after_village - boost_damage_reduction(monster.tier, boost))
            if reduced >= character.current_hearts:
                outcome = EncounterOutcome.knocked_out(final_roll, reduced)
            else:
                # Still a loss even when the boost soaks every heart
                outcome = EncounterOutcome.damaged(final_roll, reduced)
            outcome.village_reduction = damage - after_village
            outcome.boost_reduction = after_village - reduced
        else:
            outcome = EncounterOutcome.victory(final_roll)

    outcome.trail = trail
    logger.info(f"Encounter T{monster.tier} {character.name} vs {monster.name}: "
                f"roll={final_roll} atk={attack_success} def={defense_success} "
                f"-> {outcome.kind.value} ({outcome.hearts_lost} hearts)")
    return outcome


async def apply_outcome(characters, character: Character, outcome: EncounterOutcome) -> int:
    """
    Persists the hearts lost in `outcome` exactly once.
    Returns the character's hearts afterwards.
    """
    if outcome.hearts_lost <= 0 or character.immune:
        return character.current_hearts

    before = await characters.get(character.id)
    if before is None:
        raise ValueError(f"Character {character.id} vanished before damage could be applied")
    if before.ko:
        logger.info(f"Skipping heart deduction, {before.name} is already KO'd")
        return before.current_hearts

    expected = max(0, before.current_hearts - outcome.hearts_lost)
    actual = await characters.use_hearts(character.id, outcome.hearts_lost)
    if actual != expected:
        raise HeartsReconciliationError(character.id, expected, actual)

    character.current_hearts = actual
    if actual == 0:
        character.ko = True
        outcome.kind = OutcomeKind.KNOCKED_OUT
    logger.info(f"{character.name} loses {outcome.hearts_lost} hearts ({before.current_hearts} -> {actual})")
    return actual
