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

"""Stream transport between the engine and a running bot.

The reader blocks on the input stream in the calling thread and forwards each
line to the bot. A writer thread drains the bot's responses to the output
stream. Neither ever blocks the bot.
"""

import threading
from typing import TextIO

from absl import logging

from warbot.bot import bot as bot_lib


class StreamTransport:
  """Connects a `BotHandle` to a pair of text streams."""

  def __init__(
      self, handle: bot_lib.BotHandle, reader: TextIO, writer: TextIO
  ):
    self._handle = handle
    self._reader = reader
    self._writer = writer
    self._writer_thread = threading.Thread(
        target=self._drain_responses, name="warbot-writer", daemon=True
    )

  def _drain_responses(self) -> None:
    while True:
      response = self._handle.outbox.get()
      if response is bot_lib.END_OF_STREAM:
        break
      self._writer.write(response + "\n")
      self._writer.flush()

  def run(self) -> None:
    """Pumps lines until the input stream ends and every response is out.

    Stops reading as soon as the bot is found to have crashed.

    Raises:
      bot_lib.BotCrashedError: The bot stopped before the input closed.
    """
    self._writer_thread.start()
    lines = 0
    for line in self._reader:
      if self._handle.crashed.is_set():
        break
      self._handle.send(line.rstrip("\r\n"))
      lines += 1
    logging.info("Stopped reading after %d lines", lines)
    self._handle.close()
    self._handle.join()
    self._writer_thread.join()
    if self._handle.crashed.is_set():
      raise bot_lib.BotCrashedError(
          f"Bot stopped before the input closed, after {lines} lines"
      )
