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

"""Runtime configuration for the bot process and the replay harness."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class BotConfig:
  """Timing and randomness knobs.

  Attributes:
      idle_tick_seconds: How long the actor waits for a line before running
        an idle compute tick.
      response_timeout_seconds: How long a harness waits for the reply to a
        `go` or `pick_starting_region` line before failing.
      random_seed: Seed for the decision policy; None seeds from the OS.
  """
  idle_tick_seconds: float = 0.05
  response_timeout_seconds: float = 1.0
  random_seed: Optional[int] = None

  def __post_init__(self):
    if self.idle_tick_seconds <= 0:
      raise ValueError("idle_tick_seconds must be positive")
    if self.response_timeout_seconds <= 0:
      raise ValueError("response_timeout_seconds must be positive")

  @classmethod
  def from_env(cls) -> "BotConfig":
    """Create configuration from environment variables."""
    seed = os.getenv("WARBOT_RANDOM_SEED")
    return cls(
        idle_tick_seconds=float(os.getenv("WARBOT_IDLE_TICK_SECONDS", "0.05")),
        response_timeout_seconds=float(
            os.getenv("WARBOT_RESPONSE_TIMEOUT_SECONDS", "1.0")
        ),
        random_seed=int(seed) if seed else None,
    )


DEFAULT_CONFIG = BotConfig()
