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

"""Tests for the stream transport."""

import io

from absl.testing import absltest

from warbot.bot import bot as bot_lib
from warbot.bot import config as config_lib
from warbot.bot import transport


class StreamTransportTest(absltest.TestCase):

  def _run(self, text, output=None):
    handle = bot_lib.spawn(
        bot_lib.Bot(config=config_lib.BotConfig(idle_tick_seconds=0.01))
    )
    if output is None:
      output = io.StringIO()
    try:
      transport.StreamTransport(handle, io.StringIO(text), output).run()
    finally:
      self.assertFalse(handle.thread.is_alive())
    return output.getvalue()

  def test_one_output_line_per_query(self):
    output = self._run(
        "settings your_bot A\n"
        "settings opponent_bot B\n"
        "setup_map super_regions 1 5\n"
        "setup_map regions 1 1 2 1\r\n"
        "update_map 1 A 3\n"
        "go place_armies 100\n"
        "not a command\n"
        "go attack/transfer 100\n"
    )
    lines = output.splitlines()
    self.assertLen(lines, 2)
    self.assertEqual(lines[0], "A place_armies 1 5")
    self.assertEqual(lines[1], bot_lib.NO_MOVES)
    self.assertTrue(output.endswith("\n"))

  def test_empty_input(self):
    self.assertEqual(self._run(""), "")

  def test_crashed_bot_is_reported(self):
    output = io.StringIO()
    with self.assertRaises(bot_lib.BotCrashedError):
      self._run(
          "settings your_bot A\n"
          "update_map 9 A 1\n"
          "go place_armies 1\n",
          output,
      )
    self.assertEqual(output.getvalue(), "")


if __name__ == "__main__":
  absltest.main()
