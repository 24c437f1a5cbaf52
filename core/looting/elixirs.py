from typing import Dict, Optional

from core.models import Character, ElixirBuff, Monster

# Elixirs last until an activity uses them.
ELIXIR_EFFECTS: Dict[str, Dict] = {
    "Chilly Elixir": {"type": "chilly", "effects": {"waterResistance": 1.5, "blightResistance": 1}},
    "Spicy Elixir": {"type": "spicy", "effects": {"coldResistance": 1.5}},
    "Fireproof Elixir": {"type": "fireproof", "effects": {"fireResistance": 1.5}},
    "Electro Elixir": {"type": "electro", "effects": {"electricResistance": 1.5}},
    "Enduring Elixir": {"type": "enduring", "effects": {"staminaBoost": 1}},
    "Energizing Elixir": {"type": "energizing", "effects": {"staminaRecovery": 2}},
    "Hasty Elixir": {"type": "hasty", "effects": {"speedBoost": 1}},
    # Hearty hearts go on when it is drunk, so nothing is left to read afterwards
    "Hearty Elixir": {"type": "hearty", "effects": {}},
    "Mighty Elixir": {"type": "mighty", "effects": {"attackBoost": 1.5}},
    "Tough Elixir": {"type": "tough", "effects": {"defenseBoost": 1.5}},
    "Sneaky Elixir": {"type": "sneaky", "effects": {"stealthBoost": 1, "fleeBoost": 1}},
}

# Elemental elixirs are only spent against a monster of the matching element
ELEMENTAL_TRIGGERS = {
    "chilly": "Water",
    "electro": "Electric",
    "fireproof": "Fire",
    "spicy": "Ice",
}

ACTIVITY_TRIGGERS = {
    "enduring": {"travel", "gather", "loot"},
    "energizing": {"gather", "loot", "crafting"},
    "hasty": {"travel"},
    "hearty": {"combat", "helpWanted", "raid"},
    "mighty": {"combat", "helpWanted", "raid", "loot"},
    "sneaky": {"gather", "loot", "travel"},
    "tough": {"combat", "helpWanted", "raid", "loot"},
}


def build_elixir_buff(elixir_name: str) -> ElixirBuff:
    elixir = ELIXIR_EFFECTS.get(elixir_name)
    if elixir is None:
        raise ValueError(f"Unknown elixir: {elixir_name}")
    return ElixirBuff(active=True, type=elixir["type"], effects=dict(elixir["effects"]))


def get_active_buff_effects(character: Character) -> Optional[Dict[str, float]]:
    if not character.buff.active:
        return None
    return character.buff.effects


def should_consume_elixir(character: Character, activity: str, monster: Optional[Monster] = None) -> bool:
    if not character.buff.active:
        return False

    buff_type = character.buff.type
    if buff_type in ELEMENTAL_TRIGGERS:
        if activity not in {"combat", "helpWanted", "raid", "loot"} or monster is None:
            return False
        return ELEMENTAL_TRIGGERS[buff_type] in monster.name or monster.element == ELEMENTAL_TRIGGERS[buff_type].lower()

    return activity in ACTIVITY_TRIGGERS.get(buff_type, set())
