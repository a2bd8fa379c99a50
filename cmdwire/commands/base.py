"""Base classes for the command framework.

Defines what a command is and where it is registered. A Command pairs
help metadata and a FlagSpec with a CommandAction; the CommandRegistry
maps command names to Commands and is frozen once the bot is ready.

Key classes:
    InvocationRequest: Per-message input handed to an action.
    CommandAction: ABC with the single ``handle(request)`` capability.
    FunctionAction: Adapts a plain async function to CommandAction.
    Command: Immutable command definition.
    CommandRegistry: Name -> Command mapping.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Tuple

import structlog

from ..exceptions import ActionError, RegistrationError
from ..flags import EMPTY_FLAGS, Flag, FlagSpec

logger = structlog.get_logger("cmdwire.commands")

SendFn = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class InvocationRequest:
    """Everything an action needs to serve one inbound message.

    Created by the dispatcher after flag parsing and discarded once the
    action returns.
    """
    sender_id: str
    channel_id: str
    text: str
    command: str
    args: Tuple[str, ...] = ()
    flags: Mapping[str, Any] = field(default_factory=dict)
    send_fn: Optional[SendFn] = field(default=None, repr=False, compare=False)

    def arg(self, index: int) -> str:
        """Return the positional argument at index.

        Raises:
            ActionError: If there are not enough arguments.
        """
        if 0 <= index < len(self.args):
            return self.args[index]
        raise ActionError(f"missing argument #{index + 1} for {self.command}")

    async def send(self, text: str) -> None:
        """Send text to the originating channel."""
        if self.send_fn is None:
            raise RuntimeError("InvocationRequest has no reply channel")
        await self.send_fn(text)


class CommandAction(ABC):
    """What a command does when invoked.

    ``handle`` returns the reply text, or None if it already sent its
    own output through ``request.send``. Raising ActionError reports a
    failure; its message is replied verbatim.
    """

    @abstractmethod
    async def handle(self, request: InvocationRequest) -> Optional[str]:
        ...


class FunctionAction(CommandAction):
    """CommandAction backed by an async function."""

    def __init__(self, func: Callable[[InvocationRequest], Awaitable[Optional[str]]]):
        self.func = func

    async def handle(self, request: InvocationRequest) -> Optional[str]:
        return await self.func(request)

    def __repr__(self) -> str:
        return f"FunctionAction({getattr(self.func, '__qualname__', self.func)!r})"


@dataclass(frozen=True)
class Command:
    """A sub-command of the bot.

    Attributes:
        name: Registry key; the first word after the prefix.
        action: Handler run when the command is invoked.
        usage: Positional arguments as shown in help, e.g. ``<name>``.
        description: One-line description for the help menu.
        flags: Options accepted before the positional arguments.
    """
    name: str
    action: CommandAction
    usage: str = ""
    description: str = ""
    flags: FlagSpec = EMPTY_FLAGS

    def __post_init__(self):
        if not self.name or any(ch.isspace() for ch in self.name) or "`" in self.name:
            raise RegistrationError(f"invalid command name: {self.name!r}", name=self.name)
        if not isinstance(self.action, CommandAction):
            raise RegistrationError(
                f"action for {self.name} must be a CommandAction", name=self.name
            )


class CommandRegistry:
    """Maps command names to Commands.

    Written only during setup. ``freeze()`` is called on the Ready
    transition, after which the registry is read-only and safe to read
    from concurrent dispatches without locking.

    Args:
        case_insensitive: Resolve lookups ignoring case. Registered
            names must then be unique ignoring case.
    """

    def __init__(self, case_insensitive: bool = False):
        self.case_insensitive = case_insensitive
        self._commands: Dict[str, Command] = {}
        self._frozen = False

    def _key(self, name: str) -> str:
        return name.casefold() if self.case_insensitive else name

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, command: Command) -> Command:
        """Add a command.

        Raises:
            RegistrationError: If the name is taken or the registry is
                frozen.
        """
        if self._frozen:
            raise RegistrationError(
                f"cannot register {command.name}: registry is frozen",
                name=command.name,
            )
        key = self._key(command.name)
        if key in self._commands:
            raise RegistrationError(
                f"command {command.name} already registered", name=command.name
            )
        self._commands[key] = command
        logger.debug(
            "command_registered", command=command.name, flags=len(command.flags)
        )
        return command

    def command(
        self,
        name: str,
        *,
        usage: str = "",
        description: str = "",
        flags: Tuple[Flag, ...] = (),
    ) -> Callable:
        """Decorator registering an async function as a command.

        Example::

            @registry.command("greet", usage="<name>", description="say hello")
            async def greet(request):
                return f"hello {request.arg(0)}"
        """
        def decorator(func):
            self.register(
                Command(
                    name=name,
                    action=FunctionAction(func),
                    usage=usage,
                    description=description,
                    flags=FlagSpec(flags),
                )
            )
            return func
        return decorator

    def get(self, name: str) -> Optional[Command]:
        """Look up a command by name."""
        return self._commands.get(self._key(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[Command]:
        """Iterate commands in lexicographic name order."""
        for name in self.names:
            yield self._commands[self._key(name)]

    @property
    def names(self) -> Tuple[str, ...]:
        """All registered command names, sorted."""
        return tuple(sorted(command.name for command in self._commands.values()))
