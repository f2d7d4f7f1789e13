"""Shared test fixtures."""

import logging
import random
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from catalog_console.adapters.asset_storage_client import (
    AssetStorageClient,
    ProgressObserver,
)
from catalog_console.adapters.auth_client import AuthClient
from catalog_console.adapters.record_client import RecordClient
from catalog_console.catalog import build_catalog
from catalog_console.config import Settings
from catalog_console.containers import AppContainer
from catalog_console.domain.descriptors import EntityTypeDescriptor
from catalog_console.domain.errors import (
    AuthRequestFailed,
    DeleteRequestFailed,
    RecordRequestFailed,
    UploadFailed,
)
from catalog_console.domain.records import AssetUploadRequest, RecordId
from catalog_console.services.ids import IdGenerator
from catalog_console.services.pipeline import AssetRecordPipeline
from catalog_console.services.sessions import (
    CredentialPrompter,
    SessionGate,
    SessionStore,
)


@dataclass
class InMemorySessionStore(SessionStore):
    """In-memory session store for tests."""

    token: str | None = None
    reads: int = 0
    writes: list[str] = field(default_factory=list)

    def get(self) -> str | None:
        self.reads += 1
        return self.token

    def set(self, token: str) -> None:
        self.writes.append(token)
        self.token = token


@dataclass
class FakeAuthClient(AuthClient):
    """Auth client that fails with queued messages, then issues a token."""

    token: str = "token-123"
    failures: list[str] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def login(self, username: str, password: str) -> str:
        self.calls.append((username, password))
        if self.failures:
            raise AuthRequestFailed(self.failures.pop(0))
        return self.token


@dataclass
class ScriptedPrompter(CredentialPrompter):
    """Prompter that replays scripted answers."""

    answers: list[str | None] = field(default_factory=list)
    confirmations: list[bool] = field(default_factory=list)
    asked: list[str] = field(default_factory=list)
    confirmed: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)

    async def ask(self, message: str, *, secret: bool = False) -> str | None:
        self.asked.append(message)
        return self.answers.pop(0)

    async def confirm(self, message: str) -> bool:
        self.confirmed.append(message)
        return self.confirmations.pop(0)

    async def alert(self, message: str) -> None:
        self.alerts.append(message)


@dataclass
class FakeRecordClient(RecordClient):
    """In-memory record API keyed by collection."""

    rows: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    fail_methods: set[str] = field(default_factory=set)
    failure_message: str = "Server rejected the request"
    requests: list[tuple[str, str, object, str | None]] = field(default_factory=list)

    @property
    def write_requests(self) -> list[tuple[str, str, object, str | None]]:
        return [request for request in self.requests if request[0] in {"POST", "PUT"}]

    async def list_records(
        self, collection: str, token: str | None = None
    ) -> list[dict[str, object]]:
        self.requests.append(("GET", collection, None, token))
        if "GET" in self.fail_methods:
            raise RecordRequestFailed(self.failure_message, 500)
        return [dict(row) for row in self.rows.get(collection, [])]

    async def create_record(
        self, collection: str, payload: dict[str, object], token: str
    ) -> dict[str, object]:
        self.requests.append(("POST", collection, payload, token))
        if "POST" in self.fail_methods:
            raise RecordRequestFailed(self.failure_message, 400)
        self.rows.setdefault(collection, []).append(dict(payload))
        return dict(payload)

    async def update_record(
        self,
        collection: str,
        record_id: RecordId,
        payload: dict[str, object],
        token: str,
    ) -> dict[str, object]:
        self.requests.append(("PUT", collection, payload, token))
        if "PUT" in self.fail_methods:
            raise RecordRequestFailed(self.failure_message, 400)
        rows = self.rows.setdefault(collection, [])
        for index, row in enumerate(rows):
            if str(row.get("id")) == str(record_id):
                rows[index] = dict(payload)
        return dict(payload)

    async def delete_record(
        self, collection: str, record_id: RecordId, token: str
    ) -> None:
        self.requests.append(("DELETE", collection, record_id, token))
        if "DELETE" in self.fail_methods:
            raise DeleteRequestFailed(self.failure_message, 500)
        self.rows[collection] = [
            row
            for row in self.rows.get(collection, [])
            if str(row.get("id")) != str(record_id)
        ]


@dataclass
class FakeAssetStorageClient(AssetStorageClient):
    """Storage client that serves uploads from a fake CDN."""

    base_url: str = "https://cdn.example"
    error: str | None = None
    uploads: list[tuple[str, AssetUploadRequest]] = field(default_factory=list)
    on_upload: Callable[[], None] | None = None

    async def upload(
        self,
        request: AssetUploadRequest,
        key: str,
        progress: ProgressObserver | None = None,
    ) -> str:
        self.uploads.append((key, request))
        if self.on_upload is not None:
            self.on_upload()
        if self.error is not None:
            raise UploadFailed(self.error)
        if progress is not None:
            progress(0.5)
            progress(1.0)
        return f"{self.base_url}/{key}"


def make_file(
    name: str = "clip.mp4", mime_type: str = "video/mp4", size_bytes: int = 2048
) -> AssetUploadRequest:
    return AssetUploadRequest(
        file=b"x" * min(size_bytes, 4096),
        mime_type=mime_type,
        size_bytes=size_bytes,
        destination_key_hint=name,
    )


def fixed_ids(now_ms: int = 123) -> IdGenerator:
    return IdGenerator(clock=lambda: now_ms, rng=random.Random(7))


@pytest.fixture(autouse=True)
def _reset_console_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("catalog_console")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def catalog() -> dict[str, EntityTypeDescriptor]:
    return build_catalog()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_base_url="https://api.test/api",
        storage_upload_url="https://storage.test/api/uploads",
        session_file=tmp_path / "session.json",
    )


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(token="token-123")


@pytest.fixture
def record_client() -> FakeRecordClient:
    return FakeRecordClient()


@pytest.fixture
def storage_client() -> FakeAssetStorageClient:
    return FakeAssetStorageClient()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def make_pipeline(
    catalog: dict[str, EntityTypeDescriptor],
    record_client: FakeRecordClient,
    storage_client: FakeAssetStorageClient,
    session_store: InMemorySessionStore,
    prompter: ScriptedPrompter,
) -> Callable[[str], AssetRecordPipeline]:
    def factory(entity: str) -> AssetRecordPipeline:
        return AssetRecordPipeline(
            descriptor=catalog[entity],
            record_client=record_client,
            storage_client=storage_client,
            session_store=session_store,
            confirmer=prompter,
            id_generator=fixed_ids(),
        )

    return factory


@pytest.fixture
def container(
    settings: Settings,
    catalog: dict[str, EntityTypeDescriptor],
    make_pipeline: Callable[[str], AssetRecordPipeline],
    session_store: InMemorySessionStore,
    prompter: ScriptedPrompter,
) -> AppContainer:
    session_gate = SessionGate(
        session_store=session_store,
        auth_client=FakeAuthClient(),
        prompter=prompter,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_store=session_store,
        session_gate=session_gate,
        pipelines={name: make_pipeline(name) for name in catalog},
        close_resources=close_resources,
    )
