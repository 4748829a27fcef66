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

"""Map of regions and super regions as seen by the bot.

The engine only reports regions we can see. `GameMap.update_fog` reconciles
that partial view: a region we believed was ours but that was not reported in
the latest update is assumed lost to the enemy.

Regions and super regions are only ever added during map setup. Every other
operation must be given ids that were registered before; anything else means
the bot and the engine disagree about the map and raises `MapDesyncError`.
"""

import dataclasses
import enum
from typing import Iterable, Sequence

from absl import logging

# Armies on a region before the engine reports it.
DEFAULT_ARMIES = 2
# Wastelands start with a fixed neutral garrison.
WASTELAND_ARMIES = 6


class Owner(enum.Enum):
  ALLY = "ally"
  ENEMY = "enemy"
  NEUTRAL = "neutral"


class MapDesyncError(LookupError):
  """An id was used that was never registered in the map."""


@dataclasses.dataclass
class SuperRegion:
  id: int
  bonus: int
  region_ids: list[int] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class Region:
  id: int
  super_region_id: int
  neighbor_ids: list[int] = dataclasses.field(default_factory=list)
  armies: int = DEFAULT_ARMIES
  owner: Owner = Owner.NEUTRAL


class GameMap:
  """Regions, super regions and what we know about who holds them."""

  def __init__(self):
    self._super_regions: dict[int, SuperRegion] = {}
    self._regions: dict[int, Region] = {}

  def __len__(self) -> int:
    return len(self._regions)

  def _get_region(self, region_id: int) -> Region:
    try:
      return self._regions[region_id]
    except KeyError:
      raise MapDesyncError(f"Unknown region {region_id}") from None

  def _get_super_region(self, super_region_id: int) -> SuperRegion:
    try:
      return self._super_regions[super_region_id]
    except KeyError:
      raise MapDesyncError(f"Unknown super region {super_region_id}") from None

  # Mutations.

  def add_super_region(self, super_region_id: int, bonus: int) -> None:
    """Registers a super region, or sets the bonus of a pending one."""
    if super_region_id in self._super_regions:
      self._super_regions[super_region_id].bonus = bonus
    else:
      self._super_regions[super_region_id] = SuperRegion(super_region_id, bonus)

  def add_region(self, region_id: int, super_region_id: int) -> None:
    """Registers a region as a member of a super region.

    The engine may announce regions before their super regions; the super
    region is then registered with no bonus until `add_super_region` names it.

    Raises:
      MapDesyncError: The region was already registered.
    """
    if region_id in self._regions:
      raise MapDesyncError(f"Region {region_id} registered twice")
    super_region = self._super_regions.setdefault(
        super_region_id, SuperRegion(super_region_id, 0)
    )
    self._regions[region_id] = Region(region_id, super_region_id)
    super_region.region_ids.append(region_id)

  def add_region_neighbors(
      self, region_id: int, neighbor_ids: Sequence[int]
  ) -> None:
    """Makes `region_id` and each of `neighbor_ids` border each other.

    Both directions are recorded in the same call so the relation stays
    symmetric. All ids are checked before anything changes.
    """
    region = self._get_region(region_id)
    neighbors = [self._get_region(neighbor_id) for neighbor_id in neighbor_ids]
    for neighbor in neighbors:
      neighbor.neighbor_ids.append(region_id)
    region.neighbor_ids.extend(neighbor_ids)

  def upgrade_to_wasteland(self, region_id: int) -> None:
    region = self._get_region(region_id)
    region.armies = WASTELAND_ARMIES
    region.owner = Owner.NEUTRAL

  def mark_as_enemy(self, region_id: int) -> None:
    self._get_region(region_id).owner = Owner.ENEMY

  def update_map(self, region_id: int, owner: Owner, armies: int) -> None:
    """Overwrites what we know about a region with the engine's report."""
    region = self._get_region(region_id)
    region.owner = owner
    region.armies = armies

  def update_fog(self, observed_ids: Iterable[int]) -> None:
    """Downgrades allied regions missing from the latest update to enemy.

    The engine reports every region we own or can see. An allied region that
    was not reported has been taken, so it is never kept as ours.
    """
    observed = set(observed_ids)
    for region in self._regions.values():
      if region.id not in observed and region.owner == Owner.ALLY:
        logging.info("Region %d lost in the fog, marking as enemy", region.id)
        region.owner = Owner.ENEMY

  # Queries.

  def region(self, region_id: int) -> Region:
    return self._get_region(region_id)

  def super_region(self, super_region_id: int) -> SuperRegion:
    return self._get_super_region(super_region_id)

  def regions(self) -> list[Region]:
    return list(self._regions.values())

  def neighbors(self, region_id: int) -> list[Region]:
    return [
        self._get_region(neighbor_id)
        for neighbor_id in self._get_region(region_id).neighbor_ids
    ]

  def allies(self) -> list[Region]:
    """Snapshot of every region we own, in no particular order."""
    return [
        region for region in self._regions.values()
        if region.owner == Owner.ALLY
    ]

  def starting_pick_value(self, region_id: int) -> float:
    """Desirability of a region as a starting pick.

    The bonus of the region's super region divided by the armies standing in
    that super region. A super region with no armies at all scores 0.0.
    """
    super_region = self._get_super_region(
        self._get_region(region_id).super_region_id
    )
    armies = sum(
        self._regions[member_id].armies for member_id in super_region.region_ids
    )
    if armies == 0:
      return 0.0
    return super_region.bonus / armies
