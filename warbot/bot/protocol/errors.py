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

"""Errors raised while parsing engine commands.

There are exactly two kinds of parse failure:

  UNKNOWN_COMMAND: the command (or sub-command / setting key) is not part of
    the protocol.
  MALFORMED_COMMAND: the command is known but its arguments have the wrong
    shape, including numbers that fail to convert.

Every error carries a fixed description and, optionally, a detail string with
the offending input. Two errors compare equal when their kinds match; the
description and detail are only there for the logs.
"""

import enum


class ErrorKind(enum.Enum):
  UNKNOWN_COMMAND = "unknown_command"
  MALFORMED_COMMAND = "malformed_command"


class ParseError(Exception):
  """A protocol line could not be turned into a message."""

  def __init__(
      self, kind: ErrorKind, description: str, detail: str | None = None
  ):
    self.kind = kind
    self.description = description
    self.detail = detail
    super().__init__(str(self))

  def __str__(self) -> str:
    if self.detail is None:
      return self.description
    return f"{self.description}: {self.detail}"

  def __repr__(self) -> str:
    return f"ParseError({self.kind.name}, {str(self)!r})"

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, ParseError):
      return NotImplemented
    return self.kind == other.kind

  def __hash__(self) -> int:
    return hash(self.kind)


def unknown_command(description: str, detail: str | None = None) -> ParseError:
  return ParseError(ErrorKind.UNKNOWN_COMMAND, description, detail)


def malformed_command(
    description: str, detail: str | None = None
) -> ParseError:
  return ParseError(ErrorKind.MALFORMED_COMMAND, description, detail)
