# tests/test_repositories.py
import asyncio
import unittest
import aiosqlite
from datetime import datetime, timedelta

from database import DatabaseManager
from core.looting.elixirs import build_elixir_buff


class TestRepositories(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.db_conn = await aiosqlite.connect(":memory:")
        self.db = DatabaseManager(connection=self.db_conn)
        await self.db.initialize()

        self.uid = "1001"
        self.hero = await self.db.characters.create(self.uid, "Link", "Hunter", "Rudania", hearts=5, stamina=4)

    async def asyncTearDown(self):
        await self.db_conn.close()

    # =================================================================
    # Characters
    # =================================================================
    async def test_create_and_lookup(self):
        self.assertEqual(self.hero.current_hearts, 5)
        self.assertEqual(self.hero.max_hearts, 5)
        found = await self.db.characters.get_by_name(self.uid, " link ")
        self.assertEqual(found.id, self.hero.id)
        self.assertIsNone(await self.db.characters.get_by_name("someone-else", "Link"))
        self.assertIsNone(await self.db.characters.get(9999))

    async def test_create_rejects_zero_hearts(self):
        with self.assertRaises(ValueError):
            await self.db.characters.create(self.uid, "Zelda", "Priest", "Inariko", hearts=0)

    async def test_use_hearts_floors_at_zero_and_kos(self):
        hearts = await self.db.characters.use_hearts(self.hero.id, 8)
        self.assertEqual(hearts, 0)
        stored = await self.db.characters.get(self.hero.id)
        self.assertEqual(stored.current_hearts, 0)
        self.assertTrue(stored.ko)

    async def test_use_hearts_on_ko_is_a_no_op(self):
        await self.db.characters.use_hearts(self.hero.id, 5)
        hearts = await self.db.characters.use_hearts(self.hero.id, 3)
        self.assertEqual(hearts, 0)
        await self.db.characters.handle_ko(self.hero.id)
        stored = await self.db.characters.get(self.hero.id)
        self.assertEqual(stored.current_hearts, 0)
        self.assertTrue(stored.ko)

    async def test_immune_characters_take_no_damage(self):
        mod = await self.db.characters.create(self.uid, "Rauru", "Priest", "Vhintl", hearts=3, immune=True)
        self.assertEqual(await self.db.characters.use_hearts(mod.id, 10), 3)
        self.assertFalse((await self.db.characters.get(mod.id)).ko)

    async def test_negative_amounts_rejected(self):
        with self.assertRaises(ValueError):
            await self.db.characters.use_hearts(self.hero.id, -1)
        with self.assertRaises(ValueError):
            await self.db.characters.recover_hearts(self.hero.id, -1)
        with self.assertRaises(ValueError):
            await self.db.characters.use_stamina(self.hero.id, -1)

    async def test_concurrent_deductions_both_land(self):
        results = await asyncio.gather(
            self.db.characters.use_hearts(self.hero.id, 1),
            self.db.characters.use_hearts(self.hero.id, 1),
        )
        self.assertEqual(sorted(results), [3, 4])
        self.assertEqual((await self.db.characters.get(self.hero.id)).current_hearts, 3)

    async def test_recover_hearts_capped(self):
        await self.db.characters.use_hearts(self.hero.id, 2)
        self.assertEqual(await self.db.characters.recover_hearts(self.hero.id, 10), 5)

    async def test_revive_requires_healer(self):
        await self.db.characters.use_hearts(self.hero.id, 5)
        with self.assertRaises(ValueError):
            await self.db.characters.recover_hearts(self.hero.id, 2)

        hearts = await self.db.characters.recover_hearts(self.hero.id, 2, revive=True)
        self.assertEqual(hearts, 2)
        self.assertFalse((await self.db.characters.get(self.hero.id)).ko)

    async def test_stamina(self):
        self.assertEqual(await self.db.characters.use_stamina(self.hero.id, 10), 0)
        self.assertEqual(await self.db.characters.recover_stamina(self.hero.id, 2), 2)
        self.assertEqual(await self.db.characters.recover_stamina(self.hero.id, 10), 4)

    async def test_buff_round_trip(self):
        await self.db.characters.set_buff(self.hero.id, build_elixir_buff("Sneaky Elixir"))
        stored = await self.db.characters.get(self.hero.id)
        self.assertTrue(stored.buff.active)
        self.assertEqual(stored.buff.type, "sneaky")
        self.assertEqual(stored.buff.effects["stealthBoost"], 1)

        await self.db.characters.clear_buff(self.hero.id)
        self.assertFalse((await self.db.characters.get(self.hero.id)).buff.active)

    async def test_debuff_and_blight(self):
        end = datetime.now() + timedelta(days=1)
        await self.db.characters.set_debuff(self.hero.id, end)
        stored = await self.db.characters.get(self.hero.id)
        self.assertTrue(stored.debuff.active)
        self.assertEqual(stored.debuff.end_date, end)

        await self.db.characters.clear_debuff(self.hero.id)
        self.assertFalse((await self.db.characters.get(self.hero.id)).debuff.active)

        await self.db.characters.set_blight(self.hero.id, 2)
        stored = await self.db.characters.get(self.hero.id)
        self.assertTrue(stored.blighted)
        self.assertEqual(stored.blight_stage, 2)
        await self.db.characters.set_blight(self.hero.id, 0)
        self.assertFalse((await self.db.characters.get(self.hero.id)).blighted)

    # =================================================================
    # Inventory, Villages, Boosts
    # =================================================================
    async def test_inventory_stacks(self):
        await self.db.inventory.add_item(self.hero.id, "Bokoblin Horn", 2)
        await self.db.inventory.add_item(self.hero.id, "Bokoblin Horn", 1)
        await self.db.inventory.add_item(self.hero.id, "Amber", 1)
        self.assertEqual(await self.db.inventory.get_quantity(self.hero.id, "Bokoblin Horn"), 3)
        self.assertEqual(await self.db.inventory.get_all(self.hero.id), [("Amber", 1), ("Bokoblin Horn", 3)])
        self.assertEqual(await self.db.inventory.get_quantity(self.hero.id, "Diamond"), 0)

        with self.assertRaises(ValueError):
            await self.db.inventory.add_item(self.hero.id, "Amber", 0)

    async def test_village_levels(self):
        self.assertEqual(await self.db.villages.get_level("Rudania"), 1)
        await self.db.villages.set_level("Rudania", 3)
        self.assertEqual(await self.db.villages.get_level("rudania"), 3)
        with self.assertRaises(ValueError):
            await self.db.villages.set_level("Rudania", 4)

    async def test_boosts(self):
        self.assertIsNone(await self.db.boosts.get_active(self.hero.id))
        await self.db.boosts.grant(self.hero.id, "Teacher")
        await self.db.boosts.grant(self.hero.id, "Priest")
        self.assertEqual(await self.db.boosts.get_active(self.hero.id), "Priest")
        await self.db.boosts.clear(self.hero.id)
        self.assertIsNone(await self.db.boosts.get_active(self.hero.id))
