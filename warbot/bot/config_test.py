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

"""Tests for bot configuration."""

import os
from unittest import mock

from absl.testing import absltest

from warbot.bot import config as config_lib


class BotConfigTest(absltest.TestCase):

  def test_defaults(self):
    config = config_lib.BotConfig()
    self.assertEqual(config.response_timeout_seconds, 1.0)
    self.assertIsNone(config.random_seed)

  def test_from_env(self):
    env = {
        "WARBOT_IDLE_TICK_SECONDS": "0.2",
        "WARBOT_RESPONSE_TIMEOUT_SECONDS": "3",
        "WARBOT_RANDOM_SEED": "42",
    }
    with mock.patch.dict(os.environ, env):
      config = config_lib.BotConfig.from_env()
    self.assertEqual(config.idle_tick_seconds, 0.2)
    self.assertEqual(config.response_timeout_seconds, 3.0)
    self.assertEqual(config.random_seed, 42)

  def test_from_env_without_seed(self):
    with mock.patch.dict(os.environ, {}, clear=True):
      self.assertIsNone(config_lib.BotConfig.from_env().random_seed)

  def test_rejects_non_positive_timings(self):
    with self.assertRaises(ValueError):
      config_lib.BotConfig(idle_tick_seconds=0)
    with self.assertRaises(ValueError):
      config_lib.BotConfig(response_timeout_seconds=-1)


if __name__ == "__main__":
  absltest.main()
