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

"""Match settings sent by the engine.

Settings arrive one `settings <key> <value>` line at a time before the bot
knows who it is. `SettingsStore` buffers them in arrival order and, once the
bot's identity is resolved, replays them into a single `Settings` record.
Settings received afterwards update that record in place. Every key is a
plain overwrite, so the last value received for a key wins.
"""

from typing import Optional

import immutabledict
from absl import logging
from pydantic import BaseModel, ConfigDict, Field

from warbot.bot import world_map
from warbot.bot.protocol import messages

# Armies the engine hands out per round when nothing else was announced.
DEFAULT_STARTING_ARMIES = 5

NEUTRAL_OWNER_NAME = "neutral"

_FIELD_FOR_KEY = immutabledict.immutabledict({
    messages.SettingKey.TIMEBANK: "timebank",
    messages.SettingKey.TIME_PER_MOVE: "time_per_move",
    messages.SettingKey.MAX_ROUNDS: "max_rounds",
    messages.SettingKey.YOUR_BOT: "name",
    messages.SettingKey.OPPONENT_BOT: "opponent",
    messages.SettingKey.STARTING_REGIONS: "starting_regions",
    messages.SettingKey.STARTING_PICK_AMOUNT: "starting_pick_amount",
    messages.SettingKey.STARTING_ARMIES: "starting_armies",
})


class UnknownOwnerError(ValueError):
  """An owner name is neither ours, the opponent's nor neutral."""


class Settings(BaseModel):
  """Live match settings."""

  model_config = ConfigDict(validate_assignment=True)

  timebank: int = Field(0, ge=0, description="Time bank in milliseconds")
  time_per_move: int = Field(
      0, ge=0, description="Time added to the bank per move, in milliseconds"
  )
  max_rounds: int = Field(0, ge=0)
  name: Optional[str] = Field(None, description="Our bot's name")
  opponent: Optional[str] = Field(None, description="Opponent bot's name")
  starting_regions: tuple[int, ...] = ()
  starting_pick_amount: int = Field(0, ge=0)
  starting_armies: int = Field(
      DEFAULT_STARTING_ARMIES, ge=0, description="Armies to place this round"
  )

  def apply(self, setting: messages.Settings) -> None:
    setattr(self, _FIELD_FOR_KEY[setting.key], setting.value)

  def resolve_owner(self, owner_name: str) -> world_map.Owner:
    """Maps an owner name reported by the engine to an `Owner`.

    Raises:
      UnknownOwnerError: The name is not ours, the opponent's or neutral.
    """
    if self.name is not None and owner_name == self.name:
      return world_map.Owner.ALLY
    if self.opponent is not None and owner_name == self.opponent:
      return world_map.Owner.ENEMY
    if owner_name == NEUTRAL_OWNER_NAME:
      return world_map.Owner.NEUTRAL
    raise UnknownOwnerError(f"Unknown owner name: {owner_name!r}")


class SettingsStore:
  """Buffers settings until the bot's identity is known."""

  def __init__(self):
    self._buffer: list[messages.Settings] = []
    self._settings: Settings | None = None

  @property
  def resolved(self) -> bool:
    return self._settings is not None

  @property
  def settings(self) -> Settings:
    """The live record, resolving it first if needed."""
    if self._settings is None:
      self.resolve()
    return self._settings

  def add(self, setting: messages.Settings) -> None:
    if self._settings is None:
      self._buffer.append(setting)
    else:
      self._settings.apply(setting)

  def resolve(self) -> None:
    """Replays buffered settings, oldest first, into the live record."""
    if self._settings is not None:
      return
    settings = Settings()
    for setting in self._buffer:
      settings.apply(setting)
    self._buffer.clear()
    self._settings = settings
    logging.info(
        "Settings resolved: playing as %s against %s",
        settings.name,
        settings.opponent,
    )
