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

"""Messages sent by the game engine.

The set of messages is closed: `Message` is the union of every command the
engine can send and `SetupMapValue` / `OpponentMove` are the unions of their
sub-commands. Consumers match on these unions and end with
`typing.assert_never` so that adding a variant fails type checking until every
handler deals with it.
"""

import dataclasses
import enum
from typing import Sequence, TypeAlias


class SettingKey(enum.Enum):
  """Keys accepted by the `settings` command."""

  TIMEBANK = "timebank"
  TIME_PER_MOVE = "time_per_move"
  MAX_ROUNDS = "max_rounds"
  YOUR_BOT = "your_bot"
  OPPONENT_BOT = "opponent_bot"
  STARTING_REGIONS = "starting_regions"
  STARTING_PICK_AMOUNT = "starting_pick_amount"
  STARTING_ARMIES = "starting_armies"


SettingValue: TypeAlias = int | str | tuple[int, ...]


@dataclasses.dataclass(frozen=True)
class Settings:
  key: SettingKey
  value: SettingValue


# setup_map sub-commands.


@dataclasses.dataclass(frozen=True)
class SuperRegions:
  # (super region id, bonus armies)
  entries: Sequence[tuple[int, int]]


@dataclasses.dataclass(frozen=True)
class Regions:
  # (region id, super region id)
  entries: Sequence[tuple[int, int]]


@dataclasses.dataclass(frozen=True)
class Neighbors:
  # (region id, ids of the regions it borders)
  entries: Sequence[tuple[int, tuple[int, ...]]]


@dataclasses.dataclass(frozen=True)
class Wastelands:
  region_ids: Sequence[int]


@dataclasses.dataclass(frozen=True)
class OpponentStartingRegions:
  region_ids: Sequence[int]


SetupMapValue: TypeAlias = (
    SuperRegions | Regions | Neighbors | Wastelands | OpponentStartingRegions
)


@dataclasses.dataclass(frozen=True)
class SetupMap:
  value: SetupMapValue


@dataclasses.dataclass(frozen=True)
class RegionUpdate:
  region_id: int
  owner_name: str
  armies: int


@dataclasses.dataclass(frozen=True)
class UpdateMap:
  updates: Sequence[RegionUpdate]


# opponent_moves entries.


@dataclasses.dataclass(frozen=True)
class PlaceArmiesMove:
  player: str
  region_id: int
  armies: int


@dataclasses.dataclass(frozen=True)
class AttackTransferMove:
  player: str
  source_id: int
  target_id: int
  armies: int


OpponentMove: TypeAlias = PlaceArmiesMove | AttackTransferMove


@dataclasses.dataclass(frozen=True)
class OpponentMoves:
  moves: Sequence[OpponentMove]


@dataclasses.dataclass(frozen=True)
class PickStartingRegion:
  timebank: int
  region_ids: Sequence[int]


@dataclasses.dataclass(frozen=True)
class GoPlaceArmies:
  timebank: int


@dataclasses.dataclass(frozen=True)
class GoAttackTransfer:
  timebank: int


Message: TypeAlias = (
    Settings
    | SetupMap
    | UpdateMap
    | OpponentMoves
    | PickStartingRegion
    | GoPlaceArmies
    | GoAttackTransfer
)


def expects_response(message: Message) -> bool:
  """Whether the engine waits for a reply line to this message."""
  return isinstance(
      message, (PickStartingRegion, GoPlaceArmies, GoAttackTransfer)
  )
