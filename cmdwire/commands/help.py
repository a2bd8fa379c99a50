"""Help menu rendering and the built-in ``help`` command."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from ..exceptions import CommandNotFoundError
from .base import Command, CommandAction, CommandRegistry, InvocationRequest

if TYPE_CHECKING:
    from ..bot import CommandBot

FENCE = "```"
MIN_NAME_WIDTH = 12

HELP_USAGE = "[command]"
HELP_DESCRIPTION = "prints the help menu or given command's usage"


class HelpGenerator:
    """Renders help text from registry state.

    Output depends only on the arguments given here and the commands
    currently registered; nothing is cached.

    Args:
        name: Bot name for the header.
        description: Bot description.
        registry: Commands to list.
        prefix: Display prefix, e.g. ``"@Bot "``.
    """

    def __init__(self, name: str, description: str, registry: CommandRegistry, prefix: str):
        self.name = name
        self.description = description
        self.registry = registry
        self.prefix = prefix

    def global_help(self) -> str:
        commands = list(self.registry)
        width = max([MIN_NAME_WIDTH] + [len(command.name) for command in commands])
        lines = [f"  {command.name:<{width}}  {command.description}" for command in commands]
        return "\n".join([
            f"Showing help for {self.name}:",
            FENCE,
            "DESCRIPTION:",
            f"  {self.description}",
            "",
            "USAGE:",
            f"  {self.prefix}subcommand [arguments]",
            "",
            "COMMANDS:",
            *lines,
            FENCE,
        ])

    def command_help(self, command_name: str) -> str:
        """Render usage and options for one command.

        Raises:
            CommandNotFoundError: If no such command is registered.
        """
        command = self.registry.get(command_name)
        if command is None:
            raise CommandNotFoundError(command_name)
        usage = f"{self.prefix}{command.name} [options] {command.usage}".rstrip()
        return "\n".join([
            f"Showing usage for {command.name}:",
            FENCE,
            "DESCRIPTION:",
            f"  {command.description}",
            "",
            "USAGE:",
            f"  {usage}",
            "",
            "OPTIONS:",
            command.flags.render_help(),
            FENCE,
        ])


class HelpAction(CommandAction):
    """Global help with no arguments, command help with one."""

    def __init__(self, bot: CommandBot):
        self.bot = bot

    async def handle(self, request: InvocationRequest) -> Optional[str]:
        if not request.args:
            return self.bot.help()
        return self.bot.usage(request.args[0])


def help_command(bot: CommandBot) -> Command:
    """Build the ``help`` command bundled with every CommandBot."""
    return Command(
        name="help",
        action=HelpAction(bot),
        usage=HELP_USAGE,
        description=HELP_DESCRIPTION,
    )
