# tests/test_loot_table.py
import random
import pytest

from core.models import LootCandidate, LootItem, Monster
from core.looting.loot_table import (
    RARITY_WEIGHTS, adjust_rarity_weights, build_weighted_candidates, chuchu_override,
    quantity_for_rarity, roulette, select_loot, village_bonus_draws,
)
from conftest import ScriptedRng


@pytest.fixture
def horn():
    return LootCandidate(item_name="Bokoblin Horn", rarity=1, monsters=("Bokoblin",))


def test_single_common_item_always_drops(bokoblin, horn):
    rng = random.Random(42)
    for _ in range(200):
        items = select_loot(bokoblin, [horn], final_roll=rng.randint(1, 100), rng=rng)
        assert len(items) == 1
        assert items[0].item_name == "Bokoblin Horn"
        assert 1 <= items[0].quantity <= 3


def test_no_candidates_means_no_loot(bokoblin):
    assert select_loot(bokoblin, [], final_roll=50) == []


def test_candidates_for_other_monsters_are_ignored(bokoblin):
    lynel_only = LootCandidate(item_name="Lynel Guts", rarity=9, monsters=("Lynel",))
    assert select_loot(bokoblin, [lynel_only], final_roll=100) == []


def test_high_rolls_unlock_rare_multipliers():
    low = adjust_rarity_weights(10)
    high = adjust_rarity_weights(95)
    assert low == RARITY_WEIGHTS
    assert high[10] == RARITY_WEIGHTS[10] * 5
    assert high[2] == pytest.approx(RARITY_WEIGHTS[2] * 1.2)
    assert high[1] == RARITY_WEIGHTS[1]


def test_multiplier_thresholds():
    assert adjust_rarity_weights(50)[6] == RARITY_WEIGHTS[6]
    assert adjust_rarity_weights(51)[6] == RARITY_WEIGHTS[6] * 2


def test_village_level_boosts_mid_rarities():
    weights = adjust_rarity_weights(10, village_level=3, rng=ScriptedRng())
    assert weights[3] == pytest.approx(RARITY_WEIGHTS[3] * 1.20)
    assert weights[7] == pytest.approx(RARITY_WEIGHTS[7] * 1.20)
    assert weights[8] == RARITY_WEIGHTS[8]


def test_beekeeper_favors_honey(bokoblin, horn):
    honey = LootCandidate(item_name="Courser Bee Honey", rarity=1, monsters=("Bokoblin",))
    hunter = dict((c.item_name, w) for c, w in build_weighted_candidates([horn, honey], bokoblin, 10, "Hunter"))
    keeper = dict((c.item_name, w) for c, w in build_weighted_candidates([horn, honey], bokoblin, 10, "Beekeeper"))
    assert hunter["Courser Bee Honey"] == hunter["Bokoblin Horn"]
    assert keeper["Courser Bee Honey"] == keeper["Bokoblin Horn"] * 5


def test_roulette_walks_cumulative_weight(horn):
    fang = LootCandidate(item_name="Bokoblin Fang", rarity=2, monsters=("Bokoblin",))
    weighted = [(horn, 1.0), (fang, 3.0)]
    assert roulette(weighted, ScriptedRng(random_value=0.0)) is horn
    assert roulette(weighted, ScriptedRng(random_value=0.26)) is fang
    assert roulette(weighted, ScriptedRng(random_value=0.999)) is fang
    assert roulette([], ScriptedRng()) is None


def test_quantity_by_rarity():
    rng = random.Random(5)
    for _ in range(100):
        assert 1 <= quantity_for_rarity(1, rng) <= 3
        assert 1 <= quantity_for_rarity(4, rng) <= 2
        assert quantity_for_rarity(8, rng) == 1


@pytest.mark.parametrize("name,jelly,quantity", [
    ("Ice Chuchu (Large)", "White Chuchu Jelly", 3),
    ("Fire Chuchu (Small)", "Red Chuchu Jelly", 1),
    ("Electric Chuchu (Medium)", "Yellow Chuchu Jelly", 2),
    ("Chuchu (Medium)", "Chuchu Jelly", 2),
])
def test_chuchu_jelly_override(name, jelly, quantity):
    item = chuchu_override(Monster(name=name, tier=1), LootItem(item_name="Chuchu Jelly", rarity=1, quantity=3))
    assert item.item_name == jelly
    assert item.quantity == quantity


def test_non_chuchu_untouched(bokoblin):
    item = LootItem(item_name="Bokoblin Horn", rarity=1, quantity=2)
    assert chuchu_override(bokoblin, item) is item


def test_divine_blessing_takes_highest_rarity(bokoblin, horn):
    guts = LootCandidate(item_name="Bokoblin Guts", rarity=5, monsters=("Bokoblin",))
    fang = LootCandidate(item_name="Bokoblin Fang", rarity=2, monsters=("Bokoblin",))
    for seed in range(20):
        items = select_loot(bokoblin, [horn, guts, fang], final_roll=5,
                            divine_blessing=True, rng=random.Random(seed))
        assert items[0].item_name == "Bokoblin Guts"
        assert items[0].quantity == 1


def test_village_bonus_draw_odds():
    assert village_bonus_draws(1, ScriptedRng(random_value=0.0)) == 0
    assert village_bonus_draws(2, ScriptedRng(random_value=0.01)) == 1
    assert village_bonus_draws(2, ScriptedRng(random_value=0.5)) == 0
    assert village_bonus_draws(3, ScriptedRng(random_value=0.01)) == 2
    assert village_bonus_draws(3, ScriptedRng(random_value=0.05)) == 1
    assert village_bonus_draws(3, ScriptedRng(random_value=0.5)) == 0


def test_bonus_draws_are_single_items(bokoblin, horn):
    items = select_loot(bokoblin, [horn], final_roll=50, village_level=3, rng=ScriptedRng(random_value=0.01))
    assert len(items) == 3
    assert not items[0].bonus
    assert all(item.bonus and item.quantity == 1 for item in items[1:])


def test_double_haul_doubles_only_the_primary_item(bokoblin, horn):
    items = select_loot(bokoblin, [horn], final_roll=50, village_level=3,
                        rng=ScriptedRng(randints=[2], random_value=0.01), double_haul=True)
    assert items[0].quantity == 4
    assert all(item.quantity == 1 for item in items[1:])


def test_double_haul_after_divine_blessing(bokoblin, horn):
    items = select_loot(bokoblin, [horn], final_roll=50, divine_blessing=True,
                        rng=ScriptedRng(), double_haul=True)
    assert items == [LootItem(item_name="Bokoblin Horn", rarity=1, quantity=2)]
