import discord
from discord.ext import commands
from discord import app_commands, Interaction

from core.models import EncounterKind, LootResult, OutcomeKind
from core.looting.errors import LootingError


def format_loot_result(result: LootResult) -> str:
    """Plain-text summary of one loot action."""
    name = result.character_name
    if result.raid:
        monster = result.selection.monster
        return f"🌕 **{name}** stumbled onto a Tier {result.selection.tier} **{monster.name}**! A raid has begun."
    if result.selection.kind == EncounterKind.NONE:
        return f"**{name}** searched the area but found nothing of interest."

    monster = result.selection.monster
    outcome = result.outcome
    lines = [f"**{name}** encountered a **{monster.name}** (Tier {monster.tier})."]

    if outcome.trail is not None:
        lines.append("🎲 Roll: " + " → ".join(str(v) for v in outcome.trail.progression()))
    if result.reroll_outcome is not None:
        lines.append("🔮 Fated Reroll: " + ("the second roll was kept." if result.rerolled else "the first roll held."))

    if outcome.kind == OutcomeKind.KNOCKED_OUT:
        lines.append(f"💀 {name} lost {outcome.hearts_lost} heart(s) and was knocked out!")
    elif outcome.kind == OutcomeKind.DAMAGED and outcome.hearts_lost == 0:
        lines.append(f"🏃 {name} was driven off without a scratch, but came away empty-handed.")
    elif outcome.kind == OutcomeKind.DAMAGED:
        lines.append(f"💔 {name} lost {outcome.hearts_lost} heart(s) but escaped.")
    elif outcome.defense_success:
        lines.append(f"🛡️ {name} held the line and won!")
    elif outcome.attack_success:
        lines.append(f"⚔️ {name} struck first and won!")
    else:
        lines.append(f"✨ {name} won the encounter!")

    if outcome.village_reduction:
        lines.append(f"🏘️ Village defenses blocked {outcome.village_reduction} heart(s).")
    if outcome.boost_reduction:
        lines.append(f"🎵 Requiem of Spirit blocked {outcome.boost_reduction} heart(s).")

    for item in result.items:
        suffix = " *(village bonus)*" if item.bonus else ""
        emoji = f"{item.emoji} " if item.emoji else ""
        lines.append(f"• {emoji}{item.item_name} x{item.quantity}{suffix}")
    if outcome.can_loot and not result.items:
        lines.append(f"The {monster.name} had nothing worth taking.")

    lines.append(f"❤️ Hearts: {result.hearts_remaining}")
    return "\n".join(lines)


class Loot(commands.Cog, name="loot"):
    def __init__(self, bot):
        self.bot = bot

    @app_commands.command(name="loot", description="Search the wilds around your village for loot.")
    @app_commands.describe(character="The character who goes looting")
    async def loot(self, interaction: Interaction, character: str):
        await interaction.response.defer()
        user_id = str(interaction.user.id)

        try:
            result = await self.bot.looting.loot(user_id, character, blood_moon=self.bot.blood_moon_active)
        except LootingError as e:
            await interaction.followup.send(str(e), ephemeral=True)
            return
        except Exception as e:
            self.bot.logger.error(f"Loot failed for {character} ({user_id}): {e}", exc_info=True)
            await interaction.followup.send(
                "Something went wrong while looting. Please try again later.", ephemeral=True
            )
            return

        self.bot.logger.info(f"{user_id} looted with {result.character_name}: {result.outcome.kind.value}")
        await interaction.followup.send(format_loot_result(result))

async def setup(bot):
    await bot.add_cog(Loot(bot))
