# core/models.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Tuple
from enum import Enum

class OutcomeKind(Enum):
    NO_ENCOUNTER = "No Encounter"
    VICTORY = "Win!/Loot"
    DAMAGED = "Damaged"
    KNOCKED_OUT = "KO"

class EncounterKind(Enum):
    NONE = "none"
    MONSTER = "monster"
    RAID = "raid"


def normalize_key(value: Optional[str]) -> str:
    """'Fortune Teller' -> 'fortuneteller'. Used for jobs and regions."""
    return "".join((value or "").split()).lower()


@dataclass(frozen=True)
class Monster:
    name: str
    tier: int
    attack: int = 0
    defense: int = 0
    locations: Tuple[str, ...] = ()
    jobs: Tuple[str, ...] = ()
    element: str = "none"

    def is_eligible(self, region: str, job: str) -> bool:
        regions = {normalize_key(r) for r in self.locations}
        jobs = {normalize_key(j) for j in self.jobs}
        return normalize_key(region) in regions and normalize_key(job) in jobs


@dataclass(frozen=True)
class LootCandidate:
    item_name: str
    rarity: int
    monsters: Tuple[str, ...] = ()
    emoji: str = ""

    def drops_from(self, monster_name: str) -> bool:
        return monster_name in self.monsters


@dataclass
class LootItem:
    item_name: str
    rarity: int
    quantity: int = 1
    emoji: str = ""
    bonus: bool = False  # village bonus draw


@dataclass
class ElixirBuff:
    active: bool = False
    type: Optional[str] = None
    effects: Dict[str, float] = field(default_factory=dict)

    def effect(self, category: str) -> float:
        if not self.active:
            return 0
        return self.effects.get(category, 0)


@dataclass
class Debuff:
    active: bool = False
    end_date: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        # Open-ended until someone sets a date
        return self.end_date is not None and self.end_date <= now


@dataclass
class Character:
    id: int
    user_id: str
    name: str
    job: str
    current_village: str
    current_hearts: int
    max_hearts: int
    current_stamina: int
    max_stamina: int
    attack: int = 0
    defense: int = 0
    job_voucher_job: Optional[str] = None

    # Status
    buff: ElixirBuff = field(default_factory=ElixirBuff)
    debuff: Debuff = field(default_factory=Debuff)
    ko: bool = False
    blighted: bool = False
    blight_stage: int = 0
    immune: bool = False  # mod characters

    def get_total_attack(self) -> int:
        return self.attack + int(self.buff.effect("attackBoost"))

    def get_total_defense(self) -> int:
        return self.defense + int(self.buff.effect("defenseBoost"))

    def looting_job(self) -> str:
        return self.job_voucher_job or self.job


@dataclass
class Boost:
    booster_job: Optional[str] = None
    category: str = "Looting"
    roll_multiplier: float = 1.0
    roll_bonus: int = 0
    fated_reroll: bool = False
    divine_blessing: bool = False
    damage_reduction: bool = False  # hearts off per 2 monster tiers
    double_haul: bool = False

    @property
    def active(self) -> bool:
        return self.booster_job is not None

    def adjust_roll(self, raw_roll: int) -> int:
        if not self.active:
            return raw_roll
        return int(raw_roll * self.roll_multiplier) + self.roll_bonus


@dataclass
class RollTrail:
    base: int
    after_location: int
    after_status: int
    after_elixir: int
    final: int

    @property
    def before_boost(self) -> int:
        return self.after_elixir

    def progression(self) -> List[int]:
        """Distinct values in application order, for the roll display."""
        steps = [self.base]
        for value in (self.after_location, self.after_status, self.after_elixir, self.final):
            if value != steps[-1]:
                steps.append(value)
        return steps


@dataclass
class EncounterOutcome:
    kind: OutcomeKind
    roll: int = 0
    hearts_lost: int = 0
    attack_success: bool = False
    defense_success: bool = False
    can_loot: bool = False
    trail: Optional[RollTrail] = None
    village_reduction: int = 0
    boost_reduction: int = 0

    @classmethod
    def no_encounter(cls) -> "EncounterOutcome":
        return cls(kind=OutcomeKind.NO_ENCOUNTER)

    @classmethod
    def victory(cls, roll: int, attack_success: bool = False, defense_success: bool = False) -> "EncounterOutcome":
        return cls(kind=OutcomeKind.VICTORY, roll=roll, attack_success=attack_success,
                   defense_success=defense_success, can_loot=True)

    @classmethod
    def damaged(cls, roll: int, hearts_lost: int) -> "EncounterOutcome":
        return cls(kind=OutcomeKind.DAMAGED, roll=roll, hearts_lost=hearts_lost)

    @classmethod
    def knocked_out(cls, roll: int, hearts_lost: int) -> "EncounterOutcome":
        return cls(kind=OutcomeKind.KNOCKED_OUT, roll=roll, hearts_lost=hearts_lost)


@dataclass
class EncounterSelection:
    kind: EncounterKind
    monster: Optional[Monster] = None
    tier: int = 0

    @classmethod
    def none(cls) -> "EncounterSelection":
        return cls(kind=EncounterKind.NONE)


@dataclass
class LootResult:
    character_name: str
    selection: EncounterSelection
    outcome: EncounterOutcome
    items: List[LootItem] = field(default_factory=list)
    reroll_outcome: Optional[EncounterOutcome] = None
    rerolled: bool = False  # reroll was kept
    hearts_remaining: int = 0
    knocked_out: bool = False

    @property
    def raid(self) -> bool:
        return self.selection.kind == EncounterKind.RAID
