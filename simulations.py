import random
from collections import Counter

from core.models import Character
from core.looting.reference import ReferenceData
from core.looting.rolls import roll_d100, adjust_roll
from core.looting.outcomes import compute_outcome
from core.looting.loot_table import select_loot, adjust_rarity_weights


def make_character(job="Hunter", hearts=10, attack=0, defense=0, blight_stage=0):
    return Character(
        id=0, user_id="sim", name="Simulated", job=job, current_village="Rudania",
        current_hearts=hearts, max_hearts=hearts, current_stamina=5, max_stamina=5,
        attack=attack, defense=defense, blighted=blight_stage > 0, blight_stage=blight_stage,
    )


def outcome_simulation(character, monster, village_level, simulations):
    """Outcome kinds and average damage for one matchup."""
    kinds = Counter()
    total_damage = 0
    for _ in range(simulations):
        trail = adjust_roll(roll_d100(), character, village_level)
        outcome = compute_outcome(character, monster, trail, village_level)
        kinds[outcome.kind.value] += 1
        total_damage += outcome.hearts_lost
    return kinds, total_damage / simulations


def loot_simulation(reference, monster, final_roll, village_level, simulations, job="Hunter"):
    drops = Counter()
    candidates = reference.loot_for(monster.name)
    for _ in range(simulations):
        for item in select_loot(monster, candidates, final_roll, job, village_level):
            drops[item.item_name] += item.quantity
    return drops


def rarity_weight_table():
    print("Roll | " + " | ".join(f"R{r:<4}" for r in range(1, 11)))
    print("-----|" + "|".join("------" for _ in range(10)))
    for roll in (1, 25, 50, 75, 95):
        weights = adjust_rarity_weights(roll, village_level=1)
        print(f"{roll:<4} | " + " | ".join(f"{weights[r]:<5.1f}" for r in range(1, 11)))


if __name__ == "__main__":
    simulations = 10000  # Number of simulations per matchup
    reference = ReferenceData.load()

    rarity_weight_table()
    print()

    print("Monster              | Village | Blight | Win%  | Dmg%  | KO%   | Avg Dmg")
    print("---------------------|---------|--------|-------|-------|-------|--------")
    for monster in sorted(reference.monsters(), key=lambda m: m.tier):
        for village_level in (1, 3):
            for blight_stage in (0, 2):
                character = make_character(attack=2, defense=2, blight_stage=blight_stage)
                kinds, avg = outcome_simulation(character, monster, village_level, simulations)
                win = kinds["Win!/Loot"] / simulations * 100
                dmg = kinds["Damaged"] / simulations * 100
                ko = kinds["KO"] / simulations * 100
                print(f"{monster.name:<20} | {village_level:<7} | {blight_stage:<6} | "
                      f"{win:<5.1f} | {dmg:<5.1f} | {ko:<5.1f} | {avg:.2f}")

    print()
    hinox = reference.get_monster("Hinox")
    if hinox is not None:
        for final_roll in (10, 95):
            drops = loot_simulation(reference, hinox, final_roll, 1, simulations)
            print(f"Hinox drops at roll {final_roll}: {dict(drops.most_common())}")
