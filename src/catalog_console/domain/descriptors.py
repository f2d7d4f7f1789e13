"""Static per-entity configuration: fields, coercions, ids and assets."""

from dataclasses import dataclass
from enum import StrEnum

from catalog_console.domain.errors import FileTooLarge, InvalidFileType
from catalog_console.domain.records import (
    AssetUploadRequest,
    PersistedRecord,
    RecordDraft,
)


class Coercion(StrEnum):
    """How a raw form value is turned into the value sent to the API."""

    TEXT = "text"
    INTEGER = "integer"
    RATING = "rating"
    COUNT = "count"
    CHOICE = "choice"


class IdStrategy(StrEnum):
    """Where a new record's id comes from."""

    SERVER = "server"
    SEQUENTIAL = "sequential"
    TIMESTAMP = "timestamp"
    NAMESPACED = "namespaced"


RATING_MIN = 1
RATING_MAX = 5


@dataclass(frozen=True)
class AssetConstraints:
    """Accepted MIME types and size limit for an asset-backed field."""

    allowed_mime_types: frozenset[str]
    max_size_bytes: int

    def accepts(self, mime_type: str) -> bool:
        """Return whether a MIME type matches the allowed set (``type/*`` ok)."""
        normalized = mime_type.lower()
        if normalized in self.allowed_mime_types:
            return True
        major = normalized.split("/", 1)[0]
        return f"{major}/*" in self.allowed_mime_types

    def check(self, request: AssetUploadRequest) -> None:
        """Raise if the request violates these constraints."""
        if not self.accepts(request.mime_type):
            raise InvalidFileType(request.mime_type, self.allowed_mime_types)
        if request.size_bytes > self.max_size_bytes:
            raise FileTooLarge(request.size_bytes, self.max_size_bytes)


@dataclass(frozen=True)
class FieldSpec:
    """One field of an entity's draft."""

    name: str
    label: str
    required: bool = False
    coercion: Coercion = Coercion.TEXT
    wire_name: str | None = None
    choices: tuple[str, ...] = ()
    asset: AssetConstraints | None = None

    @property
    def key(self) -> str:
        """Name of the field in record API payloads."""
        return self.wire_name or self.name

    def coerce(self, raw: object) -> object:
        """Coerce a raw value, raising ``ValueError`` with a short reason."""
        text = "" if raw is None else str(raw).strip()
        if self.coercion is Coercion.COUNT:
            try:
                return int(text) if text else 0
            except ValueError:
                return 0
        if self.coercion in {Coercion.INTEGER, Coercion.RATING}:
            if not text:
                return None
            try:
                value = int(text)
            except ValueError as exc:
                raise ValueError("must be a whole number") from exc
            if self.coercion is Coercion.RATING and not (
                RATING_MIN <= value <= RATING_MAX
            ):
                raise ValueError(f"must be between {RATING_MIN} and {RATING_MAX}")
            return value
        if self.coercion is Coercion.CHOICE and text and text not in self.choices:
            raise ValueError("must be one of " + ", ".join(self.choices))
        return text


@dataclass(frozen=True)
class EntityTypeDescriptor:
    """Everything the record pipeline needs to know about one entity type."""

    name: str
    label: str
    collection: str
    namespace: str
    fields: tuple[FieldSpec, ...]
    id_strategy: IdStrategy = IdStrategy.SERVER
    id_prefix: str = ""
    read_only: bool = False
    authenticated_reads: bool = False

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.name} has no field {name!r}")

    @property
    def asset_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.asset is not None)

    @property
    def required_fields(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self.fields if spec.required)

    def empty_draft(self) -> RecordDraft:
        """Return a draft with every field blank."""
        return RecordDraft(values={spec.name: "" for spec in self.fields})

    def to_wire(self, values: dict[str, object], record_id: object = None) -> dict:
        """Build a record API payload from draft-keyed values."""
        payload: dict[str, object] = {}
        if record_id is not None:
            payload["id"] = record_id
        for spec in self.fields:
            payload[spec.key] = values.get(spec.name)
        return payload

    def from_wire(self, row: dict[str, object]) -> PersistedRecord:
        """Parse one record API row."""
        return PersistedRecord(
            id=row.get("id"),  # type: ignore[arg-type]
            values={spec.name: row.get(spec.key) for spec in self.fields},
        )
