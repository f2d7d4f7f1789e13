"""Domain models for catalog records and their staged assets."""

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

RecordId = int | str


@dataclass(frozen=True)
class AssetUploadRequest:
    """A local file selected for upload into an asset-backed field."""

    file: bytes
    mime_type: str
    size_bytes: int
    destination_key_hint: str

    @classmethod
    def from_path(cls, path: Path) -> "AssetUploadRequest":
        """Read a local file and guess its MIME type from the extension."""
        content = path.read_bytes()
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            file=content,
            mime_type=mime_type or "application/octet-stream",
            size_bytes=len(content),
            destination_key_hint=path.name,
        )


@dataclass(frozen=True)
class AssetUploadResult:
    """Public location of an asset confirmed by the storage service."""

    url: str
    key: str


@dataclass
class RecordDraft:
    """Editable, not yet persisted field values for one record."""

    values: dict[str, object] = field(default_factory=dict)

    def get(self, name: str) -> object:
        return self.values.get(name, "")

    def set(self, name: str, value: object) -> None:
        self.values[name] = value

    def is_blank(self, name: str) -> bool:
        value = self.values.get(name)
        if value is None:
            return True
        return isinstance(value, str) and not value.strip()

    def copy(self) -> "RecordDraft":
        return RecordDraft(values=dict(self.values))


@dataclass(frozen=True)
class PersistedRecord:
    """A record as returned by the record API."""

    id: RecordId | None
    values: dict[str, object]


@dataclass(frozen=True)
class Submission:
    """A validated, coerced record ready to send to the record API."""

    record_id: RecordId | None
    values: dict[str, object]
    is_update: bool = False
