"""
The bot: an event listener bound to a running puppet.
"""

import asyncio
import signal
from typing import Optional

from .listener import EventListener
from .puppet import Puppet


class Wechaty(EventListener):
    """
    Wechaty bot.

    Register handlers with the ``on_*`` methods, then ``await bot.start()``.
    ``start`` returns once ``stop`` is called or the process receives SIGINT
    or SIGTERM.

    Example:
        bot = Wechaty(puppet)
        bot.on_message(on_message)
        await bot.start()
    """

    def __init__(self, puppet: Puppet, name: str = "Wechaty"):
        super().__init__(puppet, name)
        self._stop_event: Optional[asyncio.Event] = None
        self.running = False

    async def start(self) -> None:
        """
        Start the puppet and run until stopped.

        Raises:
            PuppetError: If the puppet fails to start
        """
        self._stop_event = asyncio.Event()
        await self.puppet.start()
        self.running = True
        self.logger.info(f"{self.name} started")

        loop = asyncio.get_running_loop()
        signals = (signal.SIGINT, signal.SIGTERM)
        installed = []
        for sig in signals:
            try:
                loop.add_signal_handler(sig, lambda s=sig: self._on_signal(s))
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                self.logger.debug(f"Signal handler for {sig.name} is not supported here")

        try:
            await self._stop_event.wait()
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self._shutdown()

    def _on_signal(self, sig: signal.Signals) -> None:
        self.logger.info(f"Received exit signal {sig.name}")
        self.stop()

    def stop(self) -> None:
        """Ask a running bot to shut down."""
        if self._stop_event is not None:
            self._stop_event.set()

    async def _shutdown(self) -> None:
        self.logger.info(f"Stopping {self.name}...")
        try:
            await self.puppet.stop()
        finally:
            await self.close()
            self.running = False
            self.logger.info(f"{self.name} stopped")
