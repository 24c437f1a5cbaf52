import os
import csv
import logging
from typing import Dict, List, Optional

from core.models import Monster, LootCandidate

logger = logging.getLogger("discord_bot")

ASSETS_DIR = os.path.join(os.path.dirname(__file__), '../../assets')
MONSTERS_CSV = os.path.join(ASSETS_DIR, 'monsters.csv')
LOOT_CSV = os.path.join(ASSETS_DIR, 'loot.csv')


def _split(value: Optional[str]) -> tuple:
    return tuple(part.strip() for part in (value or "").split(';') if part.strip())


class ReferenceData:
    """Read-only monster and loot tables, loaded once at startup."""

    def __init__(self, monsters: List[Monster], loot: List[LootCandidate]):
        self._monsters = list(monsters)
        self._loot = list(loot)
        self._loot_by_monster: Dict[str, List[LootCandidate]] = {}
        for candidate in self._loot:
            for monster_name in candidate.monsters:
                self._loot_by_monster.setdefault(monster_name, []).append(candidate)

    @classmethod
    def load(cls, monsters_csv: str = MONSTERS_CSV, loot_csv: str = LOOT_CSV) -> "ReferenceData":
        monsters = []
        with open(monsters_csv, newline='', encoding='utf-8') as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                monsters.append(Monster(
                    name=row['name'].strip(),
                    tier=int(row['tier']),
                    attack=int(row.get('attack') or 0),
                    defense=int(row.get('defense') or 0),
                    element=(row.get('element') or 'none').strip().lower(),
                    locations=_split(row.get('locations')),
                    jobs=_split(row.get('jobs')),
                ))

        loot = []
        with open(loot_csv, newline='', encoding='utf-8') as csvfile:
            reader = csv.DictReader(csvfile)
            for row in reader:
                loot.append(LootCandidate(
                    item_name=row['item_name'].strip(),
                    rarity=int(row['rarity']),
                    monsters=_split(row.get('monsters')),
                    emoji=(row.get('emoji') or '').strip(),
                ))

        logger.info(f"Loaded {len(monsters)} monsters and {len(loot)} loot entries")
        return cls(monsters, loot)

    def monsters(self) -> List[Monster]:
        return list(self._monsters)

    def get_monster(self, name: str) -> Optional[Monster]:
        for monster in self._monsters:
            if monster.name == name:
                return monster
        return None

    def loot_for(self, monster_name: str) -> List[LootCandidate]:
        return list(self._loot_by_monster.get(monster_name, []))

    def monsters_by_tier(self, tier: int) -> List[Monster]:
        return [m for m in self._monsters if m.tier == tier]
