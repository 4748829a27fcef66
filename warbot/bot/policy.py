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

"""Decision policies.

A policy reads the map and the settings and decides what to answer to the
engine's queries. It never mutates the map; the bot only learns the effect of
its moves from the engine's next `update_map`.
"""

import collections
import dataclasses
import random
from typing import Protocol, Sequence

from warbot.bot import settings as settings_lib
from warbot.bot import world_map

# Attack only when the attackers outnumber the defenders by this factor.
ATTACK_RATIO = 1.7


@dataclasses.dataclass(frozen=True)
class Placement:
  region_id: int
  armies: int


@dataclasses.dataclass(frozen=True)
class AttackTransfer:
  source_id: int
  target_id: int
  armies: int


class DecisionPolicy(Protocol):
  """Generic decision policy."""

  def pick_starting_region(
      self,
      game_map: world_map.GameMap,
      settings: settings_lib.Settings,
      region_ids: Sequence[int],
  ) -> int:
    ...

  def place_armies(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> Sequence[Placement]:
    ...

  def attack_transfer(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> Sequence[AttackTransfer]:
    ...

  def idle(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> None:
    """Runs one short slice of background work between engine lines."""
    ...


class RandomPolicy(DecisionPolicy):
  """Samples moves at random, guided by a few cheap scores.

  Starting regions are picked by `GameMap.starting_pick_value`. Armies are
  scattered over our regions one at a time. Each region then attacks its
  weakest foreign neighbor when it clearly outnumbers it, or hands its armies
  to a random neighbor when it has no foreign border.
  """

  def __init__(self, seed: int | None = None):
    self._rng = random.Random(seed)
    self.idle_ticks = 0

  def pick_starting_region(
      self,
      game_map: world_map.GameMap,
      settings: settings_lib.Settings,
      region_ids: Sequence[int],
  ) -> int:
    candidates = list(region_ids)
    # Shuffle first so ties go to a random candidate.
    self._rng.shuffle(candidates)
    return max(candidates, key=game_map.starting_pick_value)

  def place_armies(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> list[Placement]:
    allies = sorted(game_map.allies(), key=lambda region: region.id)
    if not allies:
      return []
    counts = collections.Counter(
        self._rng.choice(allies).id for _ in range(settings.starting_armies)
    )
    return [
        Placement(region_id, armies)
        for region_id, armies in sorted(counts.items())
    ]

  def attack_transfer(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> list[AttackTransfer]:
    moves = []
    for region in sorted(game_map.allies(), key=lambda region: region.id):
      movable = region.armies - 1
      if movable <= 0:
        continue
      neighbors = game_map.neighbors(region.id)
      if not neighbors:
        continue
      foreign = [
          neighbor for neighbor in neighbors
          if neighbor.owner != world_map.Owner.ALLY
      ]
      if not foreign:
        target = self._rng.choice(neighbors)
        moves.append(AttackTransfer(region.id, target.id, movable))
        continue
      weakest = min(foreign, key=lambda neighbor: neighbor.armies)
      if movable >= ATTACK_RATIO * weakest.armies:
        moves.append(AttackTransfer(region.id, weakest.id, movable))
    return moves

  def idle(
      self, game_map: world_map.GameMap, settings: settings_lib.Settings
  ) -> None:
    self.idle_ticks += 1
