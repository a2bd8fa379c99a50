"""cmdwire - command dispatch for chat bots.

Recognises messages addressed to the bot, splits them into a command
and arguments (backquotes group multi-word arguments), parses
per-command flags, and runs the matching command.
"""

from .bot import CommandBot
from .commands import Command, CommandAction, CommandRegistry, FunctionAction, InvocationRequest
from .exceptions import (
    ActionError,
    CmdwireError,
    CommandNotFoundError,
    ConfigurationError,
    FlagParseError,
    NotReadyError,
    RegistrationError,
    TokenizeError,
)
from .flags import Flag, FlagKind, FlagSpec, ParsedFlags, bool_flag, int_flag, string_flag
from .gateway import ConsoleGateway, MessagingGateway
from .models import BotIdentity, MessageReceived, Ready
from .prefix import PrefixMatcher
from .tokenizer import tokenize

__version__ = "0.1.0"

__all__ = [
    "ActionError",
    "BotIdentity",
    "CmdwireError",
    "Command",
    "CommandAction",
    "CommandBot",
    "CommandNotFoundError",
    "CommandRegistry",
    "ConfigurationError",
    "ConsoleGateway",
    "Flag",
    "FlagKind",
    "FlagParseError",
    "FlagSpec",
    "FunctionAction",
    "InvocationRequest",
    "MessageReceived",
    "MessagingGateway",
    "NotReadyError",
    "ParsedFlags",
    "PrefixMatcher",
    "Ready",
    "RegistrationError",
    "TokenizeError",
    "bool_flag",
    "int_flag",
    "string_flag",
    "tokenize",
]
