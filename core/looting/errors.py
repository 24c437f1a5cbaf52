from datetime import datetime
from typing import Optional


class LootingError(Exception):
    """Validation failure reported back to the player. Never retried."""


class CharacterNotFound(LootingError):
    def __init__(self, character_name: str):
        super().__init__(f"Character `{character_name}` not found or does not belong to you.")
        self.character_name = character_name


class CharacterKnockedOut(LootingError):
    def __init__(self, character_name: str):
        super().__init__(f"{character_name} is KO'd and cannot loot. Please heal your character.")
        self.character_name = character_name


class CharacterDebuffed(LootingError):
    def __init__(self, character_name: str, end_date: Optional[datetime]):
        super().__init__(f"{character_name} is currently debuffed and cannot loot.")
        self.character_name = character_name
        self.end_date = end_date


class InvalidLocation(LootingError):
    def __init__(self, village: str):
        super().__init__(f'No region found for village "{village}".')
        self.village = village


class EmptyMonsterPool(LootingError):
    def __init__(self):
        super().__init__("No monster reference data is loaded.")


class HeartsReconciliationError(RuntimeError):
    """Persisted hearts disagree with the hearts we meant to leave behind."""

    def __init__(self, character_id: int, expected: int, actual: int):
        super().__init__(
            f"Hearts for character {character_id} out of sync: expected {expected}, found {actual}"
        )
        self.character_id = character_id
        self.expected = expected
        self.actual = actual


class CharacterBlighted(LootingError):
    def __init__(self, character_name: str, stage: int):
        super().__init__(f"{character_name} is at Blight Stage {stage} and is too sick to go looting.")
        self.character_name = character_name
        self.stage = stage


class InvalidJob(LootingError):
    def __init__(self, character_name: str, job: str):
        super().__init__(f"{character_name} can't loot as a {job}. Only jobs with the LOOTING perk can.")
        self.character_name = character_name
        self.job = job
