"""User-facing notices (the host's transient notifications)."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class Notifier:
    """Prints notices to the console and remembers them."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)
        self.messages: list[str] = []

    def notice(self, message: str, style: str = "yellow") -> None:
        self.messages.append(message)
        logger.info("notice: %s", message)
        self.console.print(f"[{style}]{escape(message)}[/{style}]", highlight=False)
