"""Command framework for cmdwire.

Provides the Command definition, the CommandAction interface, the
CommandRegistry, and help rendering.
"""

from .base import Command, CommandAction, CommandRegistry, FunctionAction, InvocationRequest
from .help import HelpAction, HelpGenerator, help_command

__all__ = [
    "Command",
    "CommandAction",
    "CommandRegistry",
    "FunctionAction",
    "HelpAction",
    "HelpGenerator",
    "InvocationRequest",
    "help_command",
]
