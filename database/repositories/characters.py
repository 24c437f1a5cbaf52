# database/repositories/characters.py

import json
import logging
import aiosqlite
from datetime import datetime
from typing import Optional

from core.models import Character, ElixirBuff, Debuff
from core.looting.errors import HeartsReconciliationError

logger = logging.getLogger("discord_bot")

COLUMNS = (
    "id, user_id, name, job, current_village, current_hearts, max_hearts, "
    "current_stamina, max_stamina, attack, defense, job_voucher_job, "
    "buff_active, buff_type, buff_effects, debuff_active, debuff_end_date, "
    "ko, blighted, blight_stage, immune"
)

MAX_CAS_RETRIES = 3


def _row_to_character(row) -> Character:
    end_date = datetime.fromisoformat(row[16]) if row[16] else None
    return Character(
        id=row[0], user_id=row[1], name=row[2], job=row[3], current_village=row[4],
        current_hearts=row[5], max_hearts=row[6],
        current_stamina=row[7], max_stamina=row[8],
        attack=row[9], defense=row[10], job_voucher_job=row[11],
        buff=ElixirBuff(active=bool(row[12]), type=row[13], effects=json.loads(row[14] or '{}')),
        debuff=Debuff(active=bool(row[15]), end_date=end_date),
        ko=bool(row[17]), blighted=bool(row[18]), blight_stage=row[19], immune=bool(row[20]),
    )


class CharacterRepository:
    def __init__(self, connection: aiosqlite.Connection):
        self.connection = connection

    # ---------------------------------------------------------
    # Lookup & Creation
    # ---------------------------------------------------------

    async def get(self, character_id: int) -> Optional[Character]:
        async with self.connection.execute(
            f"SELECT {COLUMNS} FROM characters WHERE id = ?", (character_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_character(row) if row else None

    async def get_by_name(self, user_id: str, name: str) -> Optional[Character]:
        """Names are matched case-insensitively, scoped to the owner."""
        async with self.connection.execute(
            f"SELECT {COLUMNS} FROM characters WHERE user_id = ? AND LOWER(name) = LOWER(?)",
            (user_id, name.strip())
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_character(row) if row else None

    async def create(self, user_id: str, name: str, job: str, village: str,
                     hearts: int = 3, stamina: int = 3, attack: int = 0, defense: int = 0,
                     immune: bool = False) -> Character:
        if hearts <= 0 or stamina < 0:
            raise ValueError("Characters need at least one heart and non-negative stamina")
        cursor = await self.connection.execute(
            """
            INSERT INTO characters (user_id, name, job, current_village, current_hearts, max_hearts,
                                    current_stamina, max_stamina, attack, defense, immune)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, name, job, village, hearts, hearts, stamina, stamina, attack, defense, int(immune))
        )
        await self.connection.commit()
        return await self.get(cursor.lastrowid)

    async def _fetch_vitals(self, character_id: int):
        async with self.connection.execute(
            "SELECT current_hearts, max_hearts, ko, immune, name FROM characters WHERE id = ?",
            (character_id,)
        ) as cursor:
            row = await cursor.fetchone()
        if row is None:
            raise ValueError(f"Character {character_id} does not exist")
        return row

    # ---------------------------------------------------------
    # Hearts
    # ---------------------------------------------------------

    async def use_hearts(self, character_id: int, hearts: int) -> int:
        """
        Subtracts hearts with a compare-and-set update so concurrent
        writers cannot both deduct from the same starting value.
        Returns the hearts left. KO'd and immune characters are untouched.
        """
        if hearts < 0:
            raise ValueError("Hearts to remove cannot be negative")

        for _ in range(MAX_CAS_RETRIES):
            current, _, ko, immune, name = await self._fetch_vitals(character_id)
            if ko or immune or hearts == 0:
                return current

            new_hearts = max(0, current - hearts)
            cursor = await self.connection.execute(
                """
                UPDATE characters SET current_hearts = ?, ko = ?
                WHERE id = ? AND current_hearts = ? AND ko = 0
                """,
                (new_hearts, int(new_hearts == 0), character_id, current)
            )
            if cursor.rowcount == 1:
                await self.connection.commit()
                if new_hearts == 0:
                    logger.info(f"{name} has been knocked out")
                return new_hearts
            logger.warning(f"Hearts for {name} changed mid-update, retrying")

        current = (await self._fetch_vitals(character_id))[0]
        raise HeartsReconciliationError(character_id, max(0, current - hearts), current)

    async def handle_ko(self, character_id: int) -> None:
        """Idempotent: a KO'd character stays at zero hearts."""
        await self.connection.execute(
            "UPDATE characters SET current_hearts = 0, ko = 1 WHERE id = ?",
            (character_id,)
        )
        await self.connection.commit()

    async def recover_hearts(self, character_id: int, hearts: int, revive: bool = False) -> int:
        """Only a healer (`revive=True`) can bring a KO'd character back."""
        if hearts < 0:
            raise ValueError("Hearts to recover cannot be negative")

        current, max_hearts, ko, _, name = await self._fetch_vitals(character_id)
        if ko and not revive:
            raise ValueError(f"{name} is KO'd and can only be revived by a healer")

        new_hearts = min(max_hearts, current + hearts)
        await self.connection.execute(
            "UPDATE characters SET current_hearts = ?, ko = ? WHERE id = ?",
            (new_hearts, int(new_hearts == 0), character_id)
        )
        await self.connection.commit()
        return new_hearts

    # ---------------------------------------------------------
    # Stamina
    # ---------------------------------------------------------

    async def use_stamina(self, character_id: int, stamina: int) -> int:
        if stamina < 0:
            raise ValueError("Stamina to use cannot be negative")
        await self.connection.execute(
            "UPDATE characters SET current_stamina = MAX(0, current_stamina - ?) WHERE id = ?",
            (stamina, character_id)
        )
        await self.connection.commit()
        return (await self.get(character_id)).current_stamina

    async def recover_stamina(self, character_id: int, stamina: int) -> int:
        if stamina < 0:
            raise ValueError("Stamina to recover cannot be negative")
        await self.connection.execute(
            "UPDATE characters SET current_stamina = MIN(max_stamina, current_stamina + ?) WHERE id = ?",
            (stamina, character_id)
        )
        await self.connection.commit()
        return (await self.get(character_id)).current_stamina

    # ---------------------------------------------------------
    # Status Effects
    # ---------------------------------------------------------

    async def set_buff(self, character_id: int, buff: ElixirBuff) -> None:
        await self.connection.execute(
            "UPDATE characters SET buff_active = ?, buff_type = ?, buff_effects = ? WHERE id = ?",
            (int(buff.active), buff.type, json.dumps(buff.effects), character_id)
        )
        await self.connection.commit()

    async def clear_buff(self, character_id: int) -> None:
        await self.connection.execute(
            "UPDATE characters SET buff_active = 0, buff_type = NULL, buff_effects = '{}' WHERE id = ?",
            (character_id,)
        )
        await self.connection.commit()

    async def set_debuff(self, character_id: int, end_date: datetime) -> None:
        await self.connection.execute(
            "UPDATE characters SET debuff_active = 1, debuff_end_date = ? WHERE id = ?",
            (end_date.isoformat(), character_id)
        )
        await self.connection.commit()

    async def clear_debuff(self, character_id: int) -> None:
        await self.connection.execute(
            "UPDATE characters SET debuff_active = 0, debuff_end_date = NULL WHERE id = ?",
            (character_id,)
        )
        await self.connection.commit()

    async def set_blight(self, character_id: int, stage: int) -> None:
        """Stage 0 cures the blight."""
        if stage < 0:
            raise ValueError("Blight stage cannot be negative")
        await self.connection.execute(
            "UPDATE characters SET blighted = ?, blight_stage = ? WHERE id = ?",
            (int(stage > 0), stage, character_id)
        )
        await self.connection.commit()
