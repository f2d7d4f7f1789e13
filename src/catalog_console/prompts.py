"""Terminal prompts for the operator."""

import asyncio
from dataclasses import dataclass, field

from rich.console import Console
from rich.prompt import Confirm, Prompt

from catalog_console.services.sessions import CredentialPrompter


@dataclass
class RichPrompter(CredentialPrompter):
    """Blocking rich prompts run off the event loop."""

    console: Console = field(default_factory=Console)

    async def ask(self, message: str, *, secret: bool = False) -> str | None:
        answer = await asyncio.to_thread(
            Prompt.ask,
            message,
            console=self.console,
            password=secret,
            default="",
            show_default=False,
        )
        return answer or None

    async def confirm(self, message: str) -> bool:
        return await asyncio.to_thread(
            Confirm.ask, message, console=self.console, default=False
        )

    async def alert(self, message: str) -> None:
        self.console.print(message)
