"""Main entry point for cmdwire.

Initializes logging in two phases (defaults then config-driven),
builds a CommandBot with the bundled help command, and runs it on the
console gateway with graceful shutdown on SIGTERM/SIGINT.

Key functions:
    main: Async entry point.
    run: Synchronous wrapper that calls asyncio.run(main()).
"""

import asyncio
import signal
import sys

import structlog

from .logging_config import setup_logging


async def main():
    """Main async entry point."""
    setup_logging()
    logger = structlog.get_logger("cmdwire")

    from .bot import CommandBot
    from .config import get_config
    from .gateway import ConsoleGateway
    from .models import BotIdentity

    config = get_config()
    config.validate()

    setup_logging(config)
    logger.info("cmdwire_starting", bot=config.bot_name)

    gateway = ConsoleGateway(
        BotIdentity(user_id=config.bot_user_id, username=config.bot_username)
    )
    bot = CommandBot.from_config(config, gateway)

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def handle_shutdown(sig):
        logger.info("shutdown_signal_received", signal=sig.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_shutdown, sig)
        except NotImplementedError:
            # Windows: add_signal_handler not supported.
            if sig == signal.SIGINT:
                signal.signal(
                    signal.SIGINT,
                    lambda s, f: handle_shutdown(signal.SIGINT),
                )

    gateway_task = asyncio.create_task(gateway.run(bot))
    shutdown_task = asyncio.create_task(shutdown_event.wait())
    try:
        await asyncio.wait(
            {gateway_task, shutdown_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (gateway_task, shutdown_task):
            task.cancel()
        await asyncio.gather(gateway_task, shutdown_task, return_exceptions=True)
        logger.info("cmdwire_stopped")

    if gateway_task.done() and not gateway_task.cancelled() and gateway_task.exception():
        raise gateway_task.exception()


def run():
    """Synchronous entry point for the ``cmdwire`` console script."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except SystemExit as e:
        sys.exit(e.code)


if __name__ == "__main__":
    run()
