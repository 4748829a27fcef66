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

"""Replays a recorded engine transcript against a live bot.

Transcripts are the engine's side of a match, one command per line. Blank
lines, comments (`#`) and the engine's own annotations (`Round ...`,
`Output from your bot ...`) are skipped. Every `go` and
`pick_starting_region` line must be answered with exactly one line within the
response timeout.

Usage:
  warbot-replay --transcript=warbot/bot/testdata/small_map.txt
"""

import pathlib
from typing import Iterable, Sequence

from absl import app
from absl import flags
from absl import logging
import termcolor

from warbot.bot import bot as bot_lib
from warbot.bot import config as config_lib

colored = termcolor.colored

_SKIPPED_PREFIXES = ("#", "Round", "Output")
_RESPONSE_PREFIXES = ("go", "pick_starting_region")

_TRANSCRIPT = flags.DEFINE_string(
    "transcript",
    None,
    "Engine transcript to replay.",
)

_RESPONSE_TIMEOUT_MS = flags.DEFINE_integer(
    "response_timeout_ms",
    None,
    "Milliseconds to wait for each response. Defaults to the environment.",
)

_REPLAY_SEED = flags.DEFINE_integer(
    "replay_seed",
    None,
    "Seed for the bot's decision policy.",
)


class UnexpectedResponseError(Exception):
  """The bot answered a line it should not have, or answered twice."""


def command_lines(text: str) -> list[str]:
  """Extracts the engine commands from a transcript."""
  lines = []
  for raw_line in text.split("\n"):
    line = raw_line.strip()
    if not line or line.startswith(_SKIPPED_PREFIXES):
      continue
    lines.append(line)
  return lines


def gets_response(line: str) -> bool:
  return line.startswith(_RESPONSE_PREFIXES)


def replay(
    lines: Iterable[str],
    handle: bot_lib.BotHandle,
    response_timeout_seconds: float,
) -> list[tuple[str, str]]:
  """Feeds `lines` to a running bot and collects its answers.

  Closes the bot's input once every line has been sent.

  Args:
    lines: Engine commands, in order.
    handle: The running bot.
    response_timeout_seconds: Deadline for each expected response.

  Returns:
    (command, response) pairs for every command that gets a response.

  Raises:
    bot_lib.ResponseTimeoutError: A response did not arrive in time.
    bot_lib.BotCrashedError: The bot stopped while a response was expected.
    UnexpectedResponseError: The bot sent more lines than it was asked for.
  """
  exchanges = []
  for line in lines:
    if gets_response(line):
      stray = handle.poll()
      if stray is not None:
        raise UnexpectedResponseError(
            f"Got unrequested line before {line!r}: {stray}"
        )
    handle.send(line)
    if not gets_response(line):
      continue
    response = handle.receive(timeout=response_timeout_seconds)
    extra = handle.poll()
    if extra is not None:
      raise UnexpectedResponseError(f"Got extra line after {line!r}: {extra}")
    exchanges.append((line, response))

  handle.close()
  handle.join(timeout=response_timeout_seconds)
  leftover = handle.poll()
  if leftover is not None:
    raise UnexpectedResponseError(f"Got unrequested line: {leftover}")
  return exchanges


def replay_file(
    path: pathlib.Path,
    config: config_lib.BotConfig = config_lib.DEFAULT_CONFIG,
) -> list[tuple[str, str]]:
  """Replays the transcript at `path` against a fresh bot."""
  lines = command_lines(path.read_text())
  handle = bot_lib.spawn(bot_lib.Bot(config=config))
  return replay(lines, handle, config.response_timeout_seconds)


def _print_exchanges(exchanges: Sequence[tuple[str, str]]) -> None:
  for command, response in exchanges:
    print(colored(command, "blue"))
    print(colored(f"  -> {response}", "green"))


def main(argv: Sequence[str]) -> None:
  if len(argv) > 1:
    raise app.UsageError("Too many command-line arguments.")

  config = config_lib.BotConfig.from_env()
  if _RESPONSE_TIMEOUT_MS.value is not None:
    config.response_timeout_seconds = _RESPONSE_TIMEOUT_MS.value / 1000
  if _REPLAY_SEED.value is not None:
    config.random_seed = _REPLAY_SEED.value

  path = pathlib.Path(_TRANSCRIPT.value)
  logging.info("Replaying %s", path)
  try:
    exchanges = replay_file(path, config)
  except (
      bot_lib.ResponseTimeoutError,
      bot_lib.BotCrashedError,
      UnexpectedResponseError,
  ) as e:
    print(colored(f"Replay failed: {e}", "red"))
    raise SystemExit(1) from e

  _print_exchanges(exchanges)
  print(colored(f"Replay finished: {len(exchanges)} responses.", "green"))


def run() -> None:
  flags.mark_flag_as_required("transcript")
  app.run(main)


if __name__ == "__main__":
  run()
