"""Command bot and message dispatcher.

Receives gateway events, decides whether a message addresses the bot,
and routes it through tokenizing, command lookup, flag parsing and the
command's action. Every user-facing failure becomes exactly one reply
in the originating channel; nothing is retried.

Key classes:
    CommandBot: Owns the command registry, the one-shot readiness
        transition, and the dispatch pipeline.
"""

import threading
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from .commands.base import Command, CommandRegistry, InvocationRequest
from .commands.help import HelpGenerator, help_command
from .config import DEFAULT_MENTION_FORMATS
from .exceptions import (
    CommandNotFoundError,
    FlagParseError,
    NotReadyError,
    TokenizeError,
    UserFacingError,
)
from .gateway import MessagingGateway
from .models import BotIdentity, MessageReceived, Ready
from .prefix import PrefixMatcher
from .tokenizer import tokenize

logger = structlog.get_logger("cmdwire.dispatch")


@dataclass(frozen=True)
class _ReadyState:
    """Everything fixed by the Ready transition."""
    identity: BotIdentity
    prefix: str
    matcher: PrefixMatcher
    help: HelpGenerator


class CommandBot:
    """A command-driven chat bot.

    Commands are registered on ``registry`` before the gateway delivers
    Ready. ``on_ready`` fixes the prefixes and freezes the registry;
    ``handle_message`` may then be called concurrently, once per
    inbound message.

    Args:
        name: Name shown in the help menu.
        description: Description shown in the help menu.
        gateway: Where replies are sent.
        prefix: Configured invocation prefix, e.g. ``"!"``. Optional;
            the identity-derived prefixes are always recognised.
        mention_formats: Format strings turning the bot identity into
            mention prefixes.
        case_insensitive: Resolve command names ignoring case.
    """

    def __init__(
        self,
        name: str,
        description: str,
        gateway: MessagingGateway,
        *,
        prefix: str = "",
        mention_formats: Iterable[str] = DEFAULT_MENTION_FORMATS,
        case_insensitive: bool = False,
    ):
        self.name = name
        self.description = description
        self.gateway = gateway
        self.configured_prefix = prefix
        self.mention_formats = tuple(mention_formats)
        self.registry = CommandRegistry(case_insensitive=case_insensitive)
        self.registry.register(help_command(self))

        self._ready_lock = threading.Lock()
        self._ready_event = threading.Event()
        self._state: Optional[_ReadyState] = None

    @classmethod
    def from_config(cls, config, gateway: MessagingGateway) -> "CommandBot":
        """Build a bot from a Config instance."""
        return cls(
            name=config.bot_name,
            description=config.bot_description,
            gateway=gateway,
            prefix=config.command_prefix,
            mention_formats=config.mention_formats,
            case_insensitive=config.case_insensitive_commands,
        )

    # --- Registration ---

    def register(self, command: Command) -> Command:
        return self.registry.register(command)

    def command(self, name: str, **kwargs):
        """Decorator shortcut for ``registry.command``."""
        return self.registry.command(name, **kwargs)

    # --- Readiness ---

    @property
    def is_ready(self) -> bool:
        return self._ready_event.is_set()

    def _require_ready(self) -> _ReadyState:
        if not self._ready_event.is_set():
            raise NotReadyError()
        return self._state

    @property
    def identity(self) -> BotIdentity:
        return self._require_ready().identity

    @property
    def prefix(self) -> str:
        """Display prefix used in help text."""
        return self._require_ready().prefix

    def on_ready(self, event: Ready) -> bool:
        """Apply the one-shot Uninitialized -> Ready transition.

        Computes the display prefix and the matching prefixes from the
        bot identity and freezes the registry. Later Ready events, such
        as those sent after a gateway reconnect, are ignored.

        Returns:
            True if this call performed the transition.
        """
        with self._ready_lock:
            if self._state is not None:
                logger.warning(
                    "ready_event_ignored",
                    user_id=event.identity.user_id,
                    reason="already_ready",
                )
                return False

            identity = event.identity
            display = f"@{identity.username} "
            matcher = PrefixMatcher([
                self.configured_prefix,
                *identity.mentions(self.mention_formats),
                display,
            ])
            prefix = self.configured_prefix or display
            self.registry.freeze()
            self._state = _ReadyState(
                identity=identity,
                prefix=prefix,
                matcher=matcher,
                help=HelpGenerator(self.name, self.description, self.registry, prefix),
            )
            self._ready_event.set()

        logger.info(
            "bot_ready",
            user_id=identity.user_id,
            prefix=prefix,
            prefixes=list(matcher.prefixes),
            commands=len(self.registry),
        )
        return True

    # --- Help ---

    def help(self) -> str:
        """Global help menu."""
        return self._require_ready().help.global_help()

    def usage(self, command_name: str) -> str:
        """Help menu for one command.

        Raises:
            CommandNotFoundError: If the command is not registered.
        """
        return self._require_ready().help.command_help(command_name)

    # --- Outbound ---

    async def send(self, channel_id: str, text: str) -> None:
        """Send text via the gateway. Failures are logged, not raised."""
        try:
            await self.gateway.send_text(channel_id, text)
        except Exception as e:
            logger.error("send_error", channel=channel_id, error=str(e))

    async def help_error(self, channel_id: str, error: Exception) -> None:
        """Reply with an error followed by the global help menu."""
        await self.send(channel_id, f"{error}\n{self.help()}")

    # --- Dispatch ---

    async def handle_message(self, event: MessageReceived) -> None:
        """Dispatch one inbound message.

        Raises:
            NotReadyError: If called before ``on_ready``.
        """
        state = self._require_ready()

        if event.sender_id == state.identity.user_id:
            return

        match = state.matcher.match(event.text)
        if not match.matched:
            return

        channel = event.channel_id
        log = logger.bind(channel=channel, sender=event.sender_id)

        try:
            argv = tokenize(match.remainder)
        except TokenizeError as e:
            log.info("tokenize_failed", **e.log_fields())
            await self.help_error(channel, e)
            return

        name, rest = argv[0], argv[1:]
        command = self.registry.get(name)
        if command is None:
            log.info("command_not_found", name_length=len(name))
            await self.help_error(channel, CommandNotFoundError(name))
            return

        try:
            parsed = command.flags.parse(rest)
        except FlagParseError as e:
            log.info("flag_parse_failed", command=command.name, **e.log_fields())
            await self.send(channel, str(e))
            return

        async def reply(text: str) -> None:
            await self.send(channel, text)

        request = InvocationRequest(
            sender_id=event.sender_id,
            channel_id=channel,
            text=event.text,
            command=command.name,
            args=parsed.positional,
            flags=parsed.values,
            send_fn=reply,
        )
        log.debug(
            "command_dispatch",
            command=command.name,
            args=len(parsed.positional),
            flags=sorted(parsed.values),
        )

        try:
            response = await command.action.handle(request)
        except UserFacingError as e:
            log.info("action_failed", command=command.name, **e.log_fields())
            await self.send(channel, str(e))
            return
        except Exception as e:
            log.exception("action_crashed", command=command.name, error=str(e))
            await self.send(channel, f"internal error while running {command.name}")
            return

        if response is None or response == "":
            return
        if not isinstance(response, str):
            log.error(
                "action_bad_return",
                command=command.name,
                return_type=type(response).__name__,
            )
            await self.send(channel, f"internal error while running {command.name}")
            return
        await self.send(channel, response)
