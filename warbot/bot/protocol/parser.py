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

"""Engine command parser.

Turns one protocol line into a `messages.Message` or raises
`errors.ParseError`. The parser only checks the shape of a command; whether
the ids it mentions exist is the world model's business.

Example:
  >>> parse("setup_map neighbors 1 2,3 2 4,5")
  SetupMap(value=Neighbors(entries=((1, (2, 3)), (2, (4, 5)))))
"""

import contextlib
import re
from typing import Iterator, Sequence

import immutabledict

from warbot.bot.protocol import errors
from warbot.bot.protocol import messages

U64_MAX = 2**64 - 1

_DIGITS = re.compile(r"[0-9]+")

_SCALAR_SETTINGS = immutabledict.immutabledict({
    "timebank": messages.SettingKey.TIMEBANK,
    "time_per_move": messages.SettingKey.TIME_PER_MOVE,
    "max_rounds": messages.SettingKey.MAX_ROUNDS,
    "starting_pick_amount": messages.SettingKey.STARTING_PICK_AMOUNT,
    "starting_armies": messages.SettingKey.STARTING_ARMIES,
})

_TEXT_SETTINGS = immutabledict.immutabledict({
    "your_bot": messages.SettingKey.YOUR_BOT,
    "opponent_bot": messages.SettingKey.OPPONENT_BOT,
})

PLACE_ARMIES = "place_armies"
ATTACK_TRANSFER = "attack/transfer"


def tokenize(line: str) -> list[str]:
  """Splits a trimmed line on single spaces.

  Runs of spaces are not collapsed: "a  b" yields ["a", "", "b"]. Empty tokens
  are left for numeric conversion to reject.
  """
  return line.strip().split(" ")


def parse_u64(token: str) -> int:
  """Parses a base-10 unsigned 64-bit integer.

  Raises:
    errors.ParseError: MALFORMED_COMMAND if the token is not such a number.
  """
  if not token:
    raise errors.malformed_command(
        "Failed to parse as an integer",
        "cannot parse integer from empty string",
    )
  if _DIGITS.fullmatch(token) is None:
    raise errors.malformed_command(
        "Failed to parse as an integer",
        f"invalid digit found in string {token!r}",
    )
  value = int(token)
  if value > U64_MAX:
    raise errors.malformed_command(
        "Failed to parse as an integer",
        f"number too large to fit in target type {token!r}",
    )
  return value


def _u64_list(tokens: Sequence[str]) -> tuple[int, ...]:
  return tuple(parse_u64(token) for token in tokens)


@contextlib.contextmanager
def _naming_field(field: str) -> Iterator[None]:
  """Prefixes the detail of a parse error raised inside with `field`."""
  try:
    yield
  except errors.ParseError as e:
    raise errors.ParseError(
        e.kind, e.description, f"{field}: {e.detail}"
    ) from e


def _pairs(
    tokens: Sequence[str], command: str
) -> Iterator[tuple[str, str]]:
  if not tokens:
    raise errors.malformed_command("Got command without arguments", command)
  if len(tokens) % 2:
    raise errors.malformed_command(
        "Expected an even number of arguments", command
    )
  return zip(tokens[::2], tokens[1::2])


def parse(line: str) -> messages.Message:
  """Parses one engine line.

  Args:
    line: A single protocol line, with or without its trailing newline.

  Returns:
    The parsed message.

  Raises:
    errors.ParseError: The line is not a valid command.
  """
  command, *args = tokenize(line)
  match command:
    case "settings":
      return _parse_settings(args)
    case "setup_map":
      return _parse_setup_map(args)
    case "update_map":
      return _parse_update_map(args)
    case "opponent_moves":
      return _parse_opponent_moves(args)
    case "pick_starting_region":
      return _parse_pick_starting_region(args)
    case "go":
      return _parse_go(args)
    case _:
      raise errors.unknown_command("Got an unknown command", line.strip())


def _parse_settings(args: Sequence[str]) -> messages.Settings:
  if not args:
    raise errors.malformed_command("Got setting without type")
  key, *values = args

  if key in _SCALAR_SETTINGS:
    if not values:
      raise errors.malformed_command("Missing numeric argument", key)
    with _naming_field(key):
      value = parse_u64(values[0])
    return messages.Settings(_SCALAR_SETTINGS[key], value)

  if key in _TEXT_SETTINGS:
    if not values:
      raise errors.malformed_command("Missing text argument", key)
    return messages.Settings(_TEXT_SETTINGS[key], values[0])

  if key == "starting_regions":
    if not values:
      raise errors.malformed_command(
          "Got starting_regions without any arguments"
      )
    with _naming_field(key):
      region_ids = _u64_list(values)
    return messages.Settings(messages.SettingKey.STARTING_REGIONS, region_ids)

  raise errors.unknown_command("Got an unknown setting type", key)


def _parse_setup_map(args: Sequence[str]) -> messages.SetupMap:
  if not args:
    raise errors.malformed_command("Got setup_map without type")
  subtype, *values = args

  match subtype:
    case "super_regions":
      return messages.SetupMap(
          messages.SuperRegions(tuple(
              (parse_u64(super_region_id), parse_u64(bonus))
              for super_region_id, bonus in _pairs(values, subtype)
          ))
      )
    case "regions":
      return messages.SetupMap(
          messages.Regions(tuple(
              (parse_u64(region_id), parse_u64(super_region_id))
              for region_id, super_region_id in _pairs(values, subtype)
          ))
      )
    case "neighbors":
      return messages.SetupMap(
          messages.Neighbors(tuple(
              (parse_u64(region_id), _u64_list(neighbor_ids.split(",")))
              for region_id, neighbor_ids in _pairs(values, subtype)
          ))
      )
    case "wastelands":
      if not values:
        raise errors.malformed_command("Got wastelands without any regions")
      return messages.SetupMap(messages.Wastelands(_u64_list(values)))
    case "opponent_starting_regions":
      if not values:
        raise errors.malformed_command(
            "Got opponent_starting_regions without any regions"
        )
      return messages.SetupMap(
          messages.OpponentStartingRegions(_u64_list(values))
      )
    case _:
      raise errors.unknown_command("Got an unknown setup_map type", subtype)


def _parse_update_map(args: Sequence[str]) -> messages.UpdateMap:
  if not args:
    raise errors.malformed_command("Got update_map without any regions")
  if len(args) % 3:
    raise errors.malformed_command(
        "Expected update_map arguments in groups of three", str(len(args))
    )
  return messages.UpdateMap(tuple(
      messages.RegionUpdate(
          region_id=parse_u64(args[i]),
          owner_name=args[i + 1],
          armies=parse_u64(args[i + 2]),
      )
      for i in range(0, len(args), 3)
  ))


def _parse_opponent_moves(args: Sequence[str]) -> messages.OpponentMoves:
  # An empty move list is valid: the opponent did nothing visible.
  moves = []
  remaining = list(args)
  while remaining:
    if len(remaining) < 2:
      raise errors.malformed_command(
          "Got opponent move without an action", remaining[0]
      )
    player, verb = remaining[:2]
    match verb:
      case "place_armies":
        if len(remaining) < 4:
          raise errors.malformed_command(
              "Got place_armies with missing arguments", " ".join(remaining)
          )
        moves.append(messages.PlaceArmiesMove(
            player=player,
            region_id=parse_u64(remaining[2]),
            armies=parse_u64(remaining[3]),
        ))
        remaining = remaining[4:]
      case "attack/transfer":
        if len(remaining) < 5:
          raise errors.malformed_command(
              "Got attack/transfer with missing arguments",
              " ".join(remaining),
          )
        moves.append(messages.AttackTransferMove(
            player=player,
            source_id=parse_u64(remaining[2]),
            target_id=parse_u64(remaining[3]),
            armies=parse_u64(remaining[4]),
        ))
        remaining = remaining[5:]
      case _:
        raise errors.malformed_command("Got an unknown opponent move", verb)
  return messages.OpponentMoves(tuple(moves))


def _parse_pick_starting_region(
    args: Sequence[str],
) -> messages.PickStartingRegion:
  if len(args) < 2:
    raise errors.malformed_command(
        "Got pick_starting_region without a timebank and regions"
    )
  return messages.PickStartingRegion(
      timebank=parse_u64(args[0]), region_ids=_u64_list(args[1:])
  )


def _parse_go(
    args: Sequence[str],
) -> messages.GoPlaceArmies | messages.GoAttackTransfer:
  if not args:
    raise errors.malformed_command("Got go without type")
  subtype, *values = args
  if subtype not in (PLACE_ARMIES, ATTACK_TRANSFER):
    raise errors.unknown_command("Got an unknown go type", subtype)
  if not values:
    raise errors.malformed_command("Missing numeric argument", "timebank")
  timebank = parse_u64(values[0])
  if subtype == PLACE_ARMIES:
    return messages.GoPlaceArmies(timebank)
  return messages.GoAttackTransfer(timebank)
