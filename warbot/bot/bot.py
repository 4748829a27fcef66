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

"""The bot actor.

The bot owns the map and the settings and is the only thing that mutates
them. It runs in its own thread and talks to the outside world through two
queues of strings:

  inbox:  engine lines, ended by `END_OF_STREAM`.
  outbox: response lines, ended by `END_OF_STREAM` once the bot stops.

The loop waits on the inbox for at most one idle tick. A line is parsed and
handled synchronously and answered with at most one response line. When no
line arrives in time the policy gets an idle tick and the bot waits again;
lines that arrive meanwhile stay queued.

Example:
  >>> handle = spawn(Bot())
  >>> handle.send("settings your_bot player1")
  >>> handle.send("go attack/transfer 10000")
  >>> handle.receive(timeout=1.0)
  'No moves'
"""

import dataclasses
import enum
import queue
import threading
from typing import Sequence, assert_never

from absl import logging

from warbot.bot import config as config_lib
from warbot.bot import policy as policy_lib
from warbot.bot import settings as settings_lib
from warbot.bot import world_map
from warbot.bot.protocol import errors
from warbot.bot.protocol import messages
from warbot.bot.protocol import parser

END_OF_STREAM = None
NO_MOVES = "No moves"


class BotState(enum.Enum):
  UNINITIALIZED = "uninitialized"
  ACTIVE = "active"


class Bot:
  """Handles engine lines against the map and the settings."""

  def __init__(
      self,
      policy: policy_lib.DecisionPolicy | None = None,
      config: config_lib.BotConfig = config_lib.DEFAULT_CONFIG,
  ):
    self.game_map = world_map.GameMap()
    self.settings_store = settings_lib.SettingsStore()
    self._policy = policy or policy_lib.RandomPolicy(config.random_seed)
    self._idle_tick_seconds = config.idle_tick_seconds
    self._responses: list[str] = []
    # Region ids reported by the latest map update.
    self._observed_ids: frozenset[int] = frozenset()

  @property
  def state(self) -> BotState:
    if self.settings_store.resolved:
      return BotState.ACTIVE
    return BotState.UNINITIALIZED

  @property
  def settings(self) -> settings_lib.Settings:
    return self.settings_store.settings

  def read_line(self, line: str) -> str | None:
    """Handles one engine line.

    Lines that fail to parse, or that name an unknown owner, are logged and
    dropped without touching the bot's state.

    Returns:
      The response line, or None if the line gets no response.
    """
    self._responses.clear()
    try:
      message = parser.parse(line)
    except errors.ParseError as e:
      logging.error("Dropping unparsable line %r: %s", line, e)
      return None

    logging.vlog(1, "Handling %r", message)
    try:
      self._handle(message)
    except settings_lib.UnknownOwnerError as e:
      logging.error("Dropping line %r: %s", line, e)
      self._responses.clear()
      return None

    if not self._responses:
      return None
    return " ".join(self._responses)

  def _handle(self, message: messages.Message) -> None:
    if not isinstance(message, messages.Settings):
      self.settings_store.resolve()

    match message:
      case messages.Settings():
        self.settings_store.add(message)
      case messages.SetupMap(value=value):
        self._setup_map(value)
      case messages.UpdateMap(updates=updates):
        self._update_map(updates)
      case messages.OpponentMoves(moves=moves):
        self._opponent_moves(moves)
      case messages.PickStartingRegion(region_ids=region_ids):
        region_id = self._policy.pick_starting_region(
            self.game_map, self.settings, region_ids
        )
        self._responses.append(str(region_id))
      case messages.GoPlaceArmies():
        self._place_armies()
      case messages.GoAttackTransfer():
        self._attack_transfer()
      case _:
        assert_never(message)

  def _setup_map(self, value: messages.SetupMapValue) -> None:
    match value:
      case messages.SuperRegions(entries=entries):
        for super_region_id, bonus in entries:
          self.game_map.add_super_region(super_region_id, bonus)
      case messages.Regions(entries=entries):
        for region_id, super_region_id in entries:
          self.game_map.add_region(region_id, super_region_id)
      case messages.Neighbors(entries=entries):
        for region_id, neighbor_ids in entries:
          self.game_map.add_region_neighbors(region_id, neighbor_ids)
      case messages.Wastelands(region_ids=region_ids):
        for region_id in region_ids:
          self.game_map.upgrade_to_wasteland(region_id)
      case messages.OpponentStartingRegions(region_ids=region_ids):
        for region_id in region_ids:
          self.game_map.mark_as_enemy(region_id)
      case _:
        assert_never(value)

  def _update_map(self, updates: Sequence[messages.RegionUpdate]) -> None:
    # Resolve every owner before touching the map so a bad name drops the
    # whole update.
    owners = [
        self.settings.resolve_owner(update.owner_name) for update in updates
    ]
    for update, owner in zip(updates, owners):
      self.game_map.update_map(update.region_id, owner, update.armies)
    self._observed_ids = frozenset(update.region_id for update in updates)
    self.game_map.update_fog(self._observed_ids)

  def _opponent_moves(self, moves: Sequence[messages.OpponentMove]) -> None:
    """Marks regions the opponent acted from as enemy.

    The engine sends the moves after the round's map update, which already
    reflects them. Regions that update reported keep its owner.
    """
    for move in moves:
      if move.player == self.settings.name:
        continue
      match move:
        case messages.PlaceArmiesMove(region_id=region_id):
          self._mark_unobserved_as_enemy(region_id)
        case messages.AttackTransferMove(source_id=source_id):
          self._mark_unobserved_as_enemy(source_id)
        case _:
          assert_never(move)

  def _mark_unobserved_as_enemy(self, region_id: int) -> None:
    if region_id not in self._observed_ids:
      self.game_map.mark_as_enemy(region_id)

  def _place_armies(self) -> None:
    name = self.settings.name
    for placement in self._policy.place_armies(self.game_map, self.settings):
      self._responses.append(
          f"{name} {parser.PLACE_ARMIES} {placement.region_id}"
          f" {placement.armies}"
      )
    if not self._responses:
      self._responses.append(NO_MOVES)

  def _attack_transfer(self) -> None:
    name = self.settings.name
    for move in self._policy.attack_transfer(self.game_map, self.settings):
      self._responses.append(
          f"{name} {parser.ATTACK_TRANSFER} {move.source_id}"
          f" {move.target_id} {move.armies}"
      )
    if not self._responses:
      self._responses.append(NO_MOVES)

  def idle_tick(self) -> None:
    """Gives the policy a slice of time while no line is pending."""
    if not self.settings_store.resolved:
      return
    self._policy.idle(self.game_map, self.settings)
    logging.log_every_n_seconds(logging.DEBUG, "Bot idle", 10)

  def run(
      self,
      inbox: queue.Queue,
      outbox: queue.Queue,
      crashed: threading.Event | None = None,
  ) -> None:
    """Serves lines from `inbox` until `END_OF_STREAM`.

    If handling a line raises, `crashed` is set before the outbox is ended,
    so whoever reads `END_OF_STREAM` can tell a crash from a clean stop.
    """
    logging.info("Bot actor started")
    try:
      while True:
        try:
          line = inbox.get(timeout=self._idle_tick_seconds)
        except queue.Empty:
          self.idle_tick()
          continue
        if line is END_OF_STREAM:
          break
        response = self.read_line(line)
        if response is not None:
          outbox.put(response)
    except Exception as e:  # pylint: disable=broad-exception-caught
      logging.error("Bot actor crashed: %s", e)
      if crashed is not None:
        crashed.set()
      raise
    finally:
      outbox.put(END_OF_STREAM)
    logging.info("Bot actor stopped: input closed")


class ResponseTimeoutError(Exception):
  """The bot did not answer within the deadline."""


class BotCrashedError(Exception):
  """The bot stopped while a response was expected."""


@dataclasses.dataclass
class BotHandle:
  """The transport side of a running bot."""

  inbox: queue.Queue
  outbox: queue.Queue
  thread: threading.Thread
  crashed: threading.Event = dataclasses.field(default_factory=threading.Event)

  def send(self, line: str) -> None:
    self.inbox.put(line)

  def close(self) -> None:
    self.inbox.put(END_OF_STREAM)

  def receive(self, timeout: float) -> str:
    """Waits for the next response line.

    Raises:
      ResponseTimeoutError: Nothing arrived within `timeout` seconds.
      BotCrashedError: The bot stopped instead of answering.
    """
    try:
      response = self.outbox.get(timeout=timeout)
    except queue.Empty:
      raise ResponseTimeoutError(
          f"No response within {timeout * 1000:.0f} ms"
      ) from None
    if response is END_OF_STREAM:
      raise BotCrashedError("Bot stopped before responding")
    return response

  def poll(self) -> str | None:
    """Returns a pending response line without waiting, if there is one."""
    try:
      response = self.outbox.get_nowait()
    except queue.Empty:
      return None
    if response is END_OF_STREAM:
      # Keep the marker for whoever drains the outbox next.
      self.outbox.put(END_OF_STREAM)
      return None
    return response

  def join(self, timeout: float | None = None) -> None:
    self.thread.join(timeout)


def spawn(bot: Bot, name: str = "warbot-actor") -> BotHandle:
  """Starts `bot` in its own thread."""
  inbox: queue.Queue = queue.Queue()
  outbox: queue.Queue = queue.Queue()
  crashed = threading.Event()
  thread = threading.Thread(
      target=bot.run, args=(inbox, outbox, crashed), name=name, daemon=True
  )
  thread.start()
  return BotHandle(inbox, outbox, thread, crashed)
