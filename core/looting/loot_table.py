import random
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from core.models import LootCandidate, LootItem, Monster, normalize_key

logger = logging.getLogger("discord_bot")

RARITY_WEIGHTS: Dict[int, float] = {
    1: 20, 2: 18, 3: 15, 4: 13, 5: 11,
    6: 9, 7: 7, 8: 5, 9: 2, 10: 1,
}

# rarity -> (lowest final roll that unlocks the multiplier, multiplier)
ROLL_MULTIPLIERS: Dict[int, Tuple[int, float]] = {
    10: (91, 5.0),
    9: (81, 4.0),
    8: (71, 3.0),
    7: (61, 4.0),
    6: (51, 2.0),
    5: (41, 1.8),
    4: (31, 1.6),
    3: (21, 1.4),
    2: (11, 1.2),
}

# village level -> (rarities affected, weight multiplier range)
VILLAGE_RARITY_BONUS = {
    2: (range(3, 6), (1.10, 1.15)),
    3: (range(3, 8), (1.20, 1.30)),
}

HONEY_WEIGHT_MULTIPLIER = 5


def adjust_rarity_weights(final_roll: int, village_level: int = 1, rng=random) -> Dict[int, float]:
    adjusted = {}
    for rarity, weight in RARITY_WEIGHTS.items():
        multiplier = 1.0
        unlock = ROLL_MULTIPLIERS.get(rarity)
        if unlock and final_roll >= unlock[0]:
            multiplier = unlock[1]

        village_bonus = VILLAGE_RARITY_BONUS.get(min(village_level, 3))
        if village_bonus and rarity in village_bonus[0]:
            multiplier *= rng.uniform(*village_bonus[1])

        adjusted[rarity] = weight * multiplier
    return adjusted


def build_weighted_candidates(candidates: Sequence[LootCandidate], monster: Monster, final_roll: int,
                              job: Optional[str] = None, village_level: int = 1,
                              rng=random) -> List[Tuple[LootCandidate, float]]:
    weights = adjust_rarity_weights(final_roll, village_level, rng)
    is_beekeeper = normalize_key(job) == "beekeeper"

    weighted = []
    for candidate in candidates:
        if not candidate.drops_from(monster.name):
            continue
        weight = weights.get(candidate.rarity, 0)
        if weight <= 0:
            continue
        if is_beekeeper and "honey" in candidate.item_name.lower():
            weight *= HONEY_WEIGHT_MULTIPLIER
        weighted.append((candidate, weight))
    return weighted


def roulette(weighted: Sequence[Tuple[LootCandidate, float]], rng=random) -> Optional[LootCandidate]:
    total = sum(weight for _, weight in weighted)
    if total <= 0:
        return None
    pick = rng.random() * total
    cumulative = 0.0
    for candidate, weight in weighted:
        cumulative += weight
        if pick < cumulative:
            return candidate
    return weighted[-1][0]


def quantity_for_rarity(rarity: int, rng=random) -> int:
    if rarity <= 2:
        return rng.randint(1, 3)
    if rarity <= 5:
        return rng.randint(1, 2)
    return 1


def chuchu_override(monster: Monster, item: LootItem) -> LootItem:
    """Chuchus always drop jelly: colour by element, amount by size."""
    if "Chuchu" not in monster.name:
        return item

    if "Ice" in monster.name:
        jelly = "White Chuchu Jelly"
    elif "Fire" in monster.name:
        jelly = "Red Chuchu Jelly"
    elif "Electric" in monster.name:
        jelly = "Yellow Chuchu Jelly"
    else:
        jelly = "Chuchu Jelly"

    if "Large" in monster.name:
        quantity = 3
    elif "Medium" in monster.name:
        quantity = 2
    else:
        quantity = 1

    return LootItem(item_name=jelly, rarity=item.rarity, quantity=quantity, emoji=item.emoji, bonus=item.bonus)


def _to_item(candidate: LootCandidate, quantity: int, bonus: bool = False) -> LootItem:
    return LootItem(item_name=candidate.item_name, rarity=candidate.rarity,
                    quantity=quantity, emoji=candidate.emoji, bonus=bonus)


def village_bonus_draws(village_level: int, rng=random) -> int:
    if village_level == 2:
        return 1 if rng.random() < rng.uniform(0.05, 0.10) else 0
    if village_level >= 3:
        roll = rng.random()
        if roll < rng.uniform(0.02, 0.03):
            return 2
        if roll < rng.uniform(0.10, 0.15):
            return 1
    return 0


def select_loot(monster: Monster, candidates: Sequence[LootCandidate], final_roll: int,
                job: Optional[str] = None, village_level: int = 1,
                divine_blessing: bool = False, rng=random, double_haul: bool = False) -> List[LootItem]:
    weighted = build_weighted_candidates(candidates, monster, final_roll, job, village_level, rng)
    if not weighted:
        return []

    if divine_blessing:
        top_rarity = max(c.rarity for c, _ in weighted)
        primary = rng.choice([c for c, _ in weighted if c.rarity == top_rarity])
        logger.info(f"Divine Blessing: highest rarity ({top_rarity}) drop from {monster.name}")
        items = [_to_item(primary, 1)]
    else:
        primary = roulette(weighted, rng)
        item = _to_item(primary, quantity_for_rarity(primary.rarity, rng))
        items = [chuchu_override(monster, item)]

    if double_haul:
        items[0].quantity *= 2
        logger.info(f"Double Haul: {items[0].item_name} x{items[0].quantity}")

    extra = village_bonus_draws(village_level, rng)
    for _ in range(extra):
        bonus = roulette(weighted, rng)
        items.append(_to_item(bonus, 1, bonus=True))
    if extra:
        logger.info(f"Village level {village_level} quantity bonus: +{extra} extra item(s)")

    return items
