"""Engine protocol: messages, parser and parse errors.

This package turns the engine's text commands into typed messages.
"""

from warbot.bot.protocol.errors import (
    ErrorKind,
    ParseError,
)
from warbot.bot.protocol.messages import (
    Message,
    SettingKey,
    expects_response,
)
from warbot.bot.protocol.parser import (
    ATTACK_TRANSFER,
    PLACE_ARMIES,
    parse,
    tokenize,
)

__all__ = [
    # Errors
    "ErrorKind",
    "ParseError",
    # Messages
    "Message",
    "SettingKey",
    "expects_response",
    # Parser
    "ATTACK_TRANSFER",
    "PLACE_ARMIES",
    "parse",
    "tokenize",
]
