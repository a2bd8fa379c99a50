"""Messaging gateway seam.

The gateway owns transport: it delivers Ready and MessageReceived
events to the bot and carries replies back out. Network transports
live outside this package; ConsoleGateway drives a bot from a terminal
for local development.

Key classes:
    MessagingGateway: ABC the bot sends replies through.
    ConsoleGateway: stdin/stdout gateway.

Key functions:
    log_task_exception: Done-callback for fire-and-forget dispatch tasks.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Set, TextIO

import structlog

from .models import BotIdentity, MessageReceived, Ready

if TYPE_CHECKING:
    from .bot import CommandBot

logger = structlog.get_logger("cmdwire.gateway")

CONSOLE_CHANNEL = "console"
CONSOLE_SENDER = "console-user"


def log_task_exception(task: asyncio.Task):
    """Log exceptions from fire-and-forget tasks instead of silently swallowing them."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc:
        logger.error("dispatch_task_failed", error=str(exc), exc_type=type(exc).__name__)


class MessagingGateway(ABC):
    """Transport used by a CommandBot."""

    @abstractmethod
    async def send_text(self, channel_id: str, text: str) -> None:
        """Send text to a channel. No acknowledgement is expected."""
        ...

    @abstractmethod
    async def run(self, bot: CommandBot) -> None:
        """Deliver Ready, then inbound messages, until the transport closes."""
        ...


class ConsoleGateway(MessagingGateway):
    """Reads commands from a terminal and prints replies.

    Each input line is a message from ``console-user`` in channel
    ``console``. Lines are dispatched as independent tasks, like
    concurrent deliveries from a real chat service.

    Args:
        identity: Identity announced in the Ready event.
        stdin: Input stream (default sys.stdin).
        stdout: Output stream (default sys.stdout).
    """

    def __init__(
        self,
        identity: BotIdentity,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        self.identity = identity
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._pending: Set[asyncio.Task] = set()

    async def send_text(self, channel_id: str, text: str) -> None:
        self.stdout.write(f"[{channel_id}] {text}\n")
        self.stdout.flush()

    def _start_reader(self, queue: asyncio.Queue) -> None:
        # Daemon thread so a blocked readline never holds up shutdown
        loop = asyncio.get_running_loop()

        def read_lines():
            for line in self.stdin:
                loop.call_soon_threadsafe(queue.put_nowait, line.rstrip("\r\n"))
            loop.call_soon_threadsafe(queue.put_nowait, None)

        threading.Thread(target=read_lines, name="console-reader", daemon=True).start()

    def deliver(self, bot: CommandBot, text: str) -> asyncio.Task:
        """Dispatch one line as its own task."""
        event = MessageReceived(
            sender_id=CONSOLE_SENDER, channel_id=CONSOLE_CHANNEL, text=text
        )
        task = asyncio.create_task(bot.handle_message(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        task.add_done_callback(log_task_exception)
        return task

    async def run(self, bot: CommandBot) -> None:
        bot.on_ready(Ready(identity=self.identity))
        logger.info("console_gateway_started", prefix=bot.prefix)

        queue: asyncio.Queue = asyncio.Queue()
        self._start_reader(queue)
        while True:
            line = await queue.get()
            if line is None:
                break
            if line.strip():
                self.deliver(bot, line)

        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        logger.info("console_gateway_closed")
