import random
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from core.models import (
    Character, Debuff, ElixirBuff, EncounterKind, EncounterOutcome, EncounterSelection, LootResult, Monster,
)
from core.looting.errors import (
    CharacterNotFound, CharacterKnockedOut, CharacterDebuffed, CharacterBlighted, InvalidJob,
    InvalidLocation, EmptyMonsterPool,
)
from core.looting.encounters import EncounterManager
from core.looting.elixirs import should_consume_elixir
from core.looting.rolls import roll_d100, adjust_roll
from core.looting.outcomes import compute_outcome, apply_outcome
from core.looting.reroll import maybe_reroll
from core.looting.loot_table import select_loot
from core.looting.reference import ReferenceData
from core.looting.status import StatusProvider

logger = logging.getLogger("discord_bot")

RaidTrigger = Callable[[Character, Monster], Awaitable[None]]

# Blight stages at which monsters stop showing up, and looting stops altogether
BLIGHT_NO_MONSTERS_STAGE = 3
BLIGHT_NO_LOOTING_STAGE = 4


class LootingService:
    """
    Runs one /loot action end to end:
    validate, pick an encounter, roll, resolve, persist, award loot.
    """

    def __init__(self, database, reference: ReferenceData, status: Optional[StatusProvider] = None,
                 raid_trigger: Optional[RaidTrigger] = None, no_encounter_chance: int = 20, rng=random):
        self.database = database
        self.reference = reference
        self.status = status or StatusProvider()
        self.raid_trigger = raid_trigger
        self.no_encounter_chance = no_encounter_chance
        self.rng = rng

    async def _load_character(self, user_id: str, character_name: str) -> Character:
        character = await self.database.characters.get_by_name(user_id, character_name)
        if character is None:
            raise CharacterNotFound(character_name)
        if character.ko:
            raise CharacterKnockedOut(character.name)

        if character.debuff.active:
            if character.debuff.is_expired(datetime.now()):
                await self.database.characters.clear_debuff(character.id)
                character.debuff = Debuff()
                logger.info(f"Cleared expired debuff on {character.name}")
            else:
                raise CharacterDebuffed(character.name, character.debuff.end_date)

        if character.blighted and character.blight_stage >= BLIGHT_NO_LOOTING_STAGE:
            raise CharacterBlighted(character.name, character.blight_stage)

        if not EncounterManager.has_looting_perk(character.looting_job()):
            raise InvalidJob(character.name, character.looting_job())
        return character

    async def loot(self, user_id: str, character_name: str, blood_moon: bool = False) -> LootResult:
        character = await self._load_character(user_id, character_name)

        region = EncounterManager.region_for_village(character.current_village)
        if region is None:
            raise InvalidLocation(character.current_village)

        pool = self.reference.monsters()
        if not pool:
            raise EmptyMonsterPool()

        job = character.looting_job()
        if character.blighted and character.blight_stage >= BLIGHT_NO_MONSTERS_STAGE:
            # Monsters keep away from the blighted
            logger.info(f"{character.name} is at Blight Stage {character.blight_stage}; no monsters appear")
            selection = EncounterSelection.none()
        else:
            selection = EncounterManager.select_encounter(
                region, job, pool, blood_moon=blood_moon,
                no_encounter_chance=self.no_encounter_chance, rng=self.rng
            )

        if selection.kind == EncounterKind.NONE:
            logger.info(f"{character.name} found nothing while looting in {region}")
            return LootResult(character.name, selection, EncounterOutcome.no_encounter(),
                              hearts_remaining=character.current_hearts)

        monster = selection.monster
        if selection.kind == EncounterKind.RAID:
            if self.raid_trigger is not None:
                await self.raid_trigger(character, monster)
            return LootResult(character.name, selection, EncounterOutcome.no_encounter(),
                              hearts_remaining=character.current_hearts)

        village_level = await self.database.villages.get_level(character.current_village)
        boost = await self.status.get_boost(character)

        trail = adjust_roll(roll_d100(self.rng), character, village_level, boost, self.rng)
        outcome = compute_outcome(character, monster, trail, village_level, rng=self.rng, boost=boost)
        chosen, reroll = maybe_reroll(character, monster, outcome, village_level, boost, rng=self.rng)

        # Exactly one deduction, whichever pass was kept
        hearts = await apply_outcome(self.database.characters, character, chosen)

        if should_consume_elixir(character, "loot", monster):
            await self.database.characters.clear_buff(character.id)
            logger.info(f"{character.name} used up their {character.buff.type} elixir")
            character.buff = ElixirBuff()

        items = []
        if chosen.can_loot:
            items = select_loot(monster, self.reference.loot_for(monster.name), chosen.roll,
                                job, village_level, boost.divine_blessing, self.rng,
                                double_haul=boost.double_haul)
            for item in items:
                await self.database.inventory.add_item(character.id, item.item_name, item.quantity)
            if items:
                logger.info(f"{character.name} looted " + ", ".join(f"{i.item_name} x{i.quantity}" for i in items))

        if boost.active:
            await self.status.mark_boost_used(character)

        return LootResult(
            character_name=character.name,
            selection=selection,
            outcome=chosen,
            items=items,
            reroll_outcome=reroll,
            rerolled=reroll is not None and chosen is reroll,
            hearts_remaining=hearts,
            knocked_out=character.ko,
        )
