"""Session gate guarding every console operation behind a bearer token."""

import logging
from dataclasses import dataclass
from typing import Protocol

from catalog_console.adapters.auth_client import AuthClient
from catalog_console.domain.errors import AuthRequestFailed, MissingCredential
from catalog_console.domain.status import GateState

_logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Durable storage for the session token."""

    def get(self) -> str | None:
        """Return the persisted token, if any."""

    def set(self, token: str) -> None:
        """Persist a token, replacing any previous one."""


class Confirmer(Protocol):
    """Asks the operator a yes/no question."""

    async def confirm(self, message: str) -> bool:
        """Return whether the operator agreed."""


class CredentialPrompter(Confirmer, Protocol):
    """Interactive operator prompts used by the session gate."""

    async def ask(self, message: str, *, secret: bool = False) -> str | None:
        """Prompt for a line of input; ``None`` when the operator gave none."""

    async def alert(self, message: str) -> None:
        """Show a message the operator must acknowledge."""


def _require_credential(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise MissingCredential(field)
    return value


@dataclass
class SessionGate:
    """State machine that yields a token before protected work may run.

    A persisted token is trusted without a server round-trip; expiry is
    enforced by the record API and surfaces there as a request failure.
    Login failures always offer a retry. Declining restarts the gate from
    ``BOOTSTRAPPING`` so a token persisted meanwhile is picked up.
    """

    session_store: SessionStore
    auth_client: AuthClient
    prompter: CredentialPrompter
    state: GateState = GateState.BOOTSTRAPPING
    token: str | None = None
    restarts: int = 0

    def check_auth(self) -> GateState:
        """Read the persisted token and move to AUTHENTICATED or PROMPTING."""
        token = self.session_store.get()
        if token:
            self.token = token
            self.state = GateState.AUTHENTICATED
        else:
            self.state = GateState.PROMPTING
        _logger.info("Session gate: %s", self.state)
        return self.state

    async def authenticate(self, username: str | None, password: str | None) -> str:
        """Exchange credentials for a token and persist it.

        Empty credentials are rejected before any request is made.
        """
        try:
            username = _require_credential("username", username)
            password = _require_credential("password", password)
        except MissingCredential:
            self.state = GateState.PROMPTING
            raise
        self.state = GateState.VERIFYING
        try:
            token = await self.auth_client.login(username, password)
        except AuthRequestFailed as exc:
            self.state = GateState.PROMPTING
            _logger.warning("Login failed: %s", exc.message)
            raise
        self.session_store.set(token)
        self.token = token
        self.state = GateState.AUTHENTICATED
        _logger.info("Session gate: %s", self.state)
        return token

    async def run(self) -> str:
        """Resolve the gate, prompting as often as needed."""
        while True:
            self.state = GateState.BOOTSTRAPPING
            if self.check_auth() is GateState.AUTHENTICATED and self.token:
                return self.token
            token = await self._prompt_cycle()
            if token is not None:
                return token
            self.restarts += 1
            _logger.info("Operator declined retry; restarting session gate")

    async def login(self) -> str:
        """Run a fresh prompt cycle even when a token is already stored."""
        token = await self._prompt_cycle()
        if token is not None:
            return token
        self.restarts += 1
        return await self.run()

    async def _prompt_cycle(self) -> str | None:
        while True:
            self.state = GateState.PROMPTING
            try:
                username = _require_credential(
                    "username", await self.prompter.ask("Please enter your username:")
                )
                password = await self.prompter.ask(
                    "Please enter your password:", secret=True
                )
                token = await self.authenticate(username, password)
            except MissingCredential as exc:
                await self.prompter.alert(exc.message)
                continue
            except AuthRequestFailed as exc:
                await self.prompter.alert(f"Login failed: {exc.message}")
                if await self.prompter.confirm("Would you like to try again?"):
                    continue
                return None
            await self.prompter.alert("Login successful!")
            return token
