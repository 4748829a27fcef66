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

"""Plays a match against the engine over stdin/stdout.

Logs go to stderr; stdout carries nothing but protocol responses.
"""

import sys
from typing import Sequence

from absl import app
from absl import flags
from absl import logging

from warbot.bot import bot as bot_lib
from warbot.bot import config as config_lib
from warbot.bot import transport

_IDLE_TICK_MS = flags.DEFINE_integer(
    "idle_tick_ms",
    None,
    "Milliseconds the bot waits for input before an idle compute tick."
    " Defaults to the environment.",
)

_SEED = flags.DEFINE_integer(
    "seed",
    None,
    "Seed for the decision policy.",
)


def main(argv: Sequence[str]) -> None:
  if len(argv) > 1:
    raise app.UsageError("Too many command-line arguments.")

  config = config_lib.BotConfig.from_env()
  if _IDLE_TICK_MS.value is not None:
    config.idle_tick_seconds = _IDLE_TICK_MS.value / 1000
  if _SEED.value is not None:
    config.random_seed = _SEED.value
  logging.info("Starting bot with %s", config)

  handle = bot_lib.spawn(bot_lib.Bot(config=config))
  try:
    transport.StreamTransport(handle, sys.stdin, sys.stdout).run()
  except bot_lib.BotCrashedError as e:
    logging.error("Bot failed: %s", e)
    raise SystemExit(1) from e
  logging.info("Bot finished")


def run() -> None:
  app.run(main)


if __name__ == "__main__":
  run()
