# Copyright 2025 The warbot Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for the game map."""

from absl.testing import absltest

from warbot.bot import world_map

Owner = world_map.Owner


def _small_map() -> world_map.GameMap:
  """Super region 1 holds regions 1-3, super region 2 holds region 4."""
  game_map = world_map.GameMap()
  game_map.add_super_region(1, 5)
  game_map.add_super_region(2, 2)
  for region_id in (1, 2, 3):
    game_map.add_region(region_id, 1)
  game_map.add_region(4, 2)
  return game_map


class GameMapSetupTest(absltest.TestCase):

  def test_new_region_defaults(self):
    region = _small_map().region(1)
    self.assertEqual(region.armies, world_map.DEFAULT_ARMIES)
    self.assertEqual(region.owner, Owner.NEUTRAL)
    self.assertEqual(region.neighbor_ids, [])

  def test_add_region_registers_membership(self):
    game_map = _small_map()
    self.assertEqual(game_map.super_region(1).region_ids, [1, 2, 3])
    self.assertEqual(game_map.super_region(2).region_ids, [4])
    self.assertEqual(game_map.region(4).super_region_id, 2)
    self.assertLen(game_map, 4)

  def test_region_before_super_region(self):
    game_map = world_map.GameMap()
    game_map.add_region(1, 7)
    game_map.add_super_region(7, 4)
    self.assertEqual(game_map.super_region(7).bonus, 4)
    self.assertEqual(game_map.super_region(7).region_ids, [1])

  def test_duplicate_region_changes_nothing(self):
    game_map = _small_map()
    game_map.add_region_neighbors(1, [2])
    with self.assertRaises(world_map.MapDesyncError):
      game_map.add_region(1, 2)
    self.assertEqual(game_map.super_region(1).region_ids, [1, 2, 3])
    self.assertEqual(game_map.super_region(2).region_ids, [4])
    self.assertEqual(game_map.region(1).super_region_id, 1)
    self.assertEqual(game_map.region(1).neighbor_ids, [2])
    self.assertAlmostEqual(game_map.starting_pick_value(4), 1.0)

  def test_neighbors_are_symmetric(self):
    game_map = _small_map()
    game_map.add_region_neighbors(1, [2, 3])
    self.assertIn(1, game_map.region(2).neighbor_ids)
    self.assertIn(1, game_map.region(3).neighbor_ids)
    self.assertCountEqual(game_map.region(1).neighbor_ids, [2, 3])
    self.assertCountEqual(
        [region.id for region in game_map.neighbors(1)], [2, 3]
    )

  def test_neighbors_with_unknown_id_change_nothing(self):
    game_map = _small_map()
    with self.assertRaises(world_map.MapDesyncError):
      game_map.add_region_neighbors(1, [2, 99])
    self.assertEqual(game_map.region(1).neighbor_ids, [])
    self.assertEqual(game_map.region(2).neighbor_ids, [])

  def test_wasteland(self):
    game_map = _small_map()
    game_map.update_map(3, Owner.ENEMY, 1)
    game_map.upgrade_to_wasteland(3)
    self.assertEqual(game_map.region(3).armies, world_map.WASTELAND_ARMIES)
    self.assertEqual(game_map.region(3).armies, 6)
    self.assertEqual(game_map.region(3).owner, Owner.NEUTRAL)


class GameMapUpdateTest(absltest.TestCase):

  def test_mark_as_enemy(self):
    game_map = _small_map()
    game_map.mark_as_enemy(2)
    self.assertEqual(game_map.region(2).owner, Owner.ENEMY)

  def test_update_map_overwrites(self):
    game_map = _small_map()
    game_map.update_map(1, Owner.ALLY, 9)
    game_map.update_map(1, Owner.ENEMY, 3)
    self.assertEqual(game_map.region(1).owner, Owner.ENEMY)
    self.assertEqual(game_map.region(1).armies, 3)

  def test_fog_downgrades_unobserved_allies_only(self):
    game_map = _small_map()
    game_map.update_map(1, Owner.ALLY, 2)
    game_map.update_map(2, Owner.ALLY, 2)
    game_map.update_map(3, Owner.ENEMY, 2)

    game_map.update_fog([1])

    self.assertEqual(game_map.region(1).owner, Owner.ALLY)
    self.assertEqual(game_map.region(2).owner, Owner.ENEMY)
    self.assertEqual(game_map.region(3).owner, Owner.ENEMY)
    self.assertEqual(game_map.region(4).owner, Owner.NEUTRAL)

  def test_fog_with_empty_observation(self):
    game_map = _small_map()
    game_map.update_map(4, Owner.ALLY, 2)
    game_map.update_fog([])
    self.assertEqual(game_map.region(4).owner, Owner.ENEMY)

  def test_unknown_region_raises(self):
    game_map = _small_map()
    with self.assertRaises(world_map.MapDesyncError):
      game_map.update_map(42, Owner.ALLY, 1)
    with self.assertRaises(world_map.MapDesyncError):
      game_map.mark_as_enemy(42)
    with self.assertRaises(world_map.MapDesyncError):
      game_map.upgrade_to_wasteland(42)
    with self.assertRaises(LookupError):
      game_map.region(42)


class GameMapQueryTest(absltest.TestCase):

  def test_allies(self):
    game_map = _small_map()
    self.assertEmpty(game_map.allies())
    game_map.update_map(1, Owner.ALLY, 2)
    game_map.update_map(4, Owner.ALLY, 2)
    self.assertCountEqual(
        [region.id for region in game_map.allies()], [1, 4]
    )

  def test_allies_is_a_snapshot(self):
    game_map = _small_map()
    game_map.update_map(1, Owner.ALLY, 2)
    allies = game_map.allies()
    game_map.update_map(2, Owner.ALLY, 2)
    self.assertLen(allies, 1)

  def test_starting_pick_value(self):
    game_map = _small_map()
    # Bonus 5 over three regions of 2 armies.
    self.assertAlmostEqual(game_map.starting_pick_value(1), 5 / 6)
    self.assertAlmostEqual(game_map.starting_pick_value(4), 1.0)
    game_map.upgrade_to_wasteland(2)
    self.assertAlmostEqual(game_map.starting_pick_value(1), 5 / 10)

  def test_starting_pick_value_with_no_armies(self):
    game_map = _small_map()
    game_map.update_map(4, Owner.NEUTRAL, 0)
    self.assertEqual(game_map.starting_pick_value(4), 0.0)


if __name__ == "__main__":
  absltest.main()
