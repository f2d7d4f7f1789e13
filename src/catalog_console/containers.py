"""Dependency container wiring for the console."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from catalog_console.adapters.asset_storage_client import HttpxAssetStorageClient
from catalog_console.adapters.auth_client import HttpxAuthClient
from catalog_console.adapters.record_client import HttpxRecordClient
from catalog_console.adapters.session_store import FileSessionStore, origin_of
from catalog_console.catalog import build_catalog
from catalog_console.config import Settings
from catalog_console.prompts import RichPrompter
from catalog_console.services.pipeline import AssetRecordPipeline
from catalog_console.services.sessions import (
    CredentialPrompter,
    SessionGate,
    SessionStore,
)


@dataclass
class AppContainer:
    """Holds console-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    session_gate: SessionGate
    pipelines: dict[str, AssetRecordPipeline]
    close_resources: Callable[[], Awaitable[None]]

    def pipeline(self, entity: str) -> AssetRecordPipeline:
        """Return the pipeline for an entity name."""
        try:
            return self.pipelines[entity]
        except KeyError:
            known = ", ".join(sorted(self.pipelines))
            raise KeyError(
                f"Unknown entity {entity!r}; expected one of: {known}"
            ) from None


def build_container(
    settings: Settings | None = None,
    prompter: CredentialPrompter | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_prompter = prompter or RichPrompter()
    session_store = FileSessionStore(
        path=resolved_settings.session_path,
        origin=origin_of(resolved_settings.api_base_url),
    )
    auth_client = HttpxAuthClient.create(
        resolved_settings.login_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    record_client = HttpxRecordClient.create(
        resolved_settings.api_base_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    storage_client = HttpxAssetStorageClient.create(
        resolved_settings.storage_upload_url,
        timeout=resolved_settings.upload_timeout_seconds,
    )
    session_gate = SessionGate(
        session_store=session_store,
        auth_client=auth_client,
        prompter=resolved_prompter,
    )
    catalog = build_catalog(
        max_video_bytes=resolved_settings.max_video_bytes,
        max_image_bytes=resolved_settings.max_image_bytes,
    )
    pipelines = {
        name: AssetRecordPipeline(
            descriptor=descriptor,
            record_client=record_client,
            storage_client=storage_client,
            session_store=session_store,
            confirmer=resolved_prompter,
        )
        for name, descriptor in catalog.items()
    }

    async def close_resources() -> None:
        await auth_client.close()
        await record_client.close()
        await storage_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        session_gate=session_gate,
        pipelines=pipelines,
        close_resources=close_resources,
    )
