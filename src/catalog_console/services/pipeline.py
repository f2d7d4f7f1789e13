"""Upload-then-persist pipeline shared by every catalog screen."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from catalog_console.adapters.asset_storage_client import AssetStorageClient
from catalog_console.adapters.record_client import RecordClient
from catalog_console.domain.descriptors import EntityTypeDescriptor, FieldSpec
from catalog_console.domain.errors import (
    ConsoleError,
    IncompleteDraft,
    MissingCredential,
    ReadOnlyCollection,
)
from catalog_console.domain.records import (
    AssetUploadRequest,
    AssetUploadResult,
    PersistedRecord,
    RecordDraft,
    RecordId,
    Submission,
)
from catalog_console.domain.status import SubmissionState
from catalog_console.services.ids import IdGenerator
from catalog_console.services.sessions import Confirmer, SessionStore

UploadProgress = Callable[[str, float], None]

_logger = logging.getLogger(__name__)


@dataclass
class AssetRecordPipeline:
    """Turns a draft plus optional staged files into a persisted record.

    Staged files are uploaded before any record request is made, so a record
    never references an asset the storage service did not confirm. A failed
    record request after a successful upload leaves the asset in storage; it
    stays folded into the draft so a retry does not upload it again.
    """

    descriptor: EntityTypeDescriptor
    record_client: RecordClient
    storage_client: AssetStorageClient
    session_store: SessionStore
    confirmer: Confirmer
    id_generator: IdGenerator = field(default_factory=IdGenerator)
    progress_observer: UploadProgress | None = None
    draft: RecordDraft = field(init=False)
    staged: dict[str, AssetUploadRequest] = field(init=False, default_factory=dict)
    records: list[PersistedRecord] = field(init=False, default_factory=list)
    editing_id: RecordId | None = field(init=False, default=None)
    is_open: bool = field(init=False, default=False)
    state: SubmissionState = field(init=False, default=SubmissionState.IDLE)
    history: list[SubmissionState] = field(init=False, default_factory=list)
    last_error: ConsoleError | None = field(init=False, default=None)
    _session: int = field(init=False, default=0, repr=False)

    def __post_init__(self) -> None:
        self.draft = self.descriptor.empty_draft()

    def open_new(self) -> None:
        """Open the editing surface on an empty draft."""
        self._reset_draft()
        self._session += 1
        self.is_open = True
        self.last_error = None

    def open_edit(self, record: PersistedRecord) -> None:
        """Open the editing surface on an existing record."""
        self._reset_draft()
        for name, value in record.values.items():
            self.draft.set(name, "" if value is None else value)
        self.editing_id = record.id
        self._session += 1
        self.is_open = True
        self.last_error = None

    def close(self) -> None:
        """Close the editing surface, dropping staged files."""
        self._session += 1
        self.is_open = False
        self.staged.clear()

    def set_field(self, name: str, value: object) -> None:
        """Set a draft field; asset fields go through ``enter_url``."""
        spec = self.descriptor.field(name)
        if spec.asset is not None:
            self.enter_url(name, str(value))
            return
        self.draft.set(name, value)

    def enter_url(self, name: str, url: str) -> None:
        """Type an asset URL by hand, replacing any staged file for the field."""
        self._asset_field(name)
        self.staged.pop(name, None)
        self.draft.set(name, url)

    def validate_file(self, name: str, request: AssetUploadRequest) -> None:
        """Check a selected file and stage it as the field's upload candidate.

        A rejected file never changes the slot: an empty slot stays empty and
        a previous candidate or typed URL stays in place. An accepted file
        replaces the candidate and clears any URL typed for the same field.
        """
        spec = self._asset_field(name)
        spec.asset.check(request)  # type: ignore[union-attr]
        self.staged[name] = request
        self.draft.set(name, "")

    async def upload_asset(
        self, name: str, request: AssetUploadRequest
    ) -> AssetUploadResult:
        """Upload one staged file and return its public URL."""
        key = self.id_generator.storage_key(
            self.descriptor.namespace, request.destination_key_hint
        )
        _logger.info("Uploading %s (%s bytes) as %s", name, request.size_bytes, key)

        def report(fraction: float) -> None:
            if self.progress_observer is not None:
                self.progress_observer(name, fraction)

        url = await self.storage_client.upload(request, key, report)
        _logger.info("Uploaded %s to %s", key, url)
        return AssetUploadResult(url=url, key=key)

    def compose_submission(self, draft: RecordDraft) -> Submission:
        """Validate and coerce a draft and assign the record id."""
        values = self._coerce(draft, satisfied=set())
        if self.editing_id is not None:
            return Submission(
                record_id=self.editing_id, values=values, is_update=True
            )
        record_id = self.id_generator.assign(
            self.descriptor, [record.id for record in self.records]
        )
        return Submission(record_id=record_id, values=values)

    async def submit(self) -> PersistedRecord | None:
        """Upload staged files, then create or update the record.

        Returns ``None`` when the editing surface was closed or reopened while
        uploading; the upload result is then discarded, no record request is
        made and a draft opened meanwhile is left untouched.
        """
        self._ensure_writable()
        self.history = []
        session = self._session
        uploaded: list[str] = []
        try:
            self._enter(SubmissionState.VALIDATING)
            self._coerce(self.draft, satisfied=set(self.staged))
            for spec in self.descriptor.asset_fields:
                request = self.staged.get(spec.name)
                if request is None:
                    continue
                self._enter(SubmissionState.UPLOADING_ASSET)
                result = await self.upload_asset(spec.name, request)
                uploaded.append(result.url)
                if self._session != session:
                    self._discard(uploaded)
                    return None
                self.staged.pop(spec.name, None)
                self.draft.set(spec.name, result.url)
            self._enter(SubmissionState.COMPOSING)
            submission = self.compose_submission(self.draft)
            self._enter(SubmissionState.SUBMITTING)
            record = await self._persist(submission)
        except ConsoleError as exc:
            self._fail(exc)
            if uploaded:
                _logger.warning(
                    "Record not saved after uploading %s; assets are not cleaned up",
                    ", ".join(uploaded),
                )
            raise
        if self._session == session:
            self._reset_draft()
            self.close()
        self._enter(SubmissionState.IDLE)
        await self._refresh()
        return record

    async def delete_record(self, record_id: RecordId) -> bool:
        """Delete a record after the operator confirms.

        Returns ``False`` when the operator declines. The cached list is only
        replaced by a refetch after the delete succeeds; a failed refetch
        keeps the stale list and does not undo the ``True`` result.
        """
        self._ensure_writable()
        question = f"Are you sure you want to delete this {self.descriptor.label}?"
        if not await self.confirmer.confirm(question):
            return False
        token = self._token()
        try:
            await self.record_client.delete_record(
                self.descriptor.collection, record_id, token
            )
        except ConsoleError as exc:
            self.last_error = exc
            raise
        _logger.info("Deleted %s %s", self.descriptor.label, record_id)
        await self._refresh()
        return True

    async def list_records(self) -> list[PersistedRecord]:
        """Fetch the full collection and replace the cached list."""
        token = None
        if self.descriptor.authenticated_reads:
            token = self.session_store.get()
        try:
            rows = await self.record_client.list_records(
                self.descriptor.collection, token
            )
        except ConsoleError as exc:
            self.last_error = exc
            raise
        self.records = [self.descriptor.from_wire(row) for row in rows]
        return self.records

    def find_record(self, record_id: RecordId) -> PersistedRecord | None:
        """Return a cached record by id, comparing ids as text."""
        for record in self.records:
            if str(record.id) == str(record_id):
                return record
        return None

    async def _persist(self, submission: Submission) -> PersistedRecord:
        token = self._token()
        collection = self.descriptor.collection
        payload = self.descriptor.to_wire(submission.values, submission.record_id)
        if submission.is_update and submission.record_id is not None:
            body = await self.record_client.update_record(
                collection, submission.record_id, payload, token
            )
        else:
            body = await self.record_client.create_record(collection, payload, token)
        _logger.info(
            "%s %s %s",
            "Updated" if submission.is_update else "Created",
            self.descriptor.label,
            submission.record_id,
        )
        if body:
            return self.descriptor.from_wire(body)
        return PersistedRecord(id=submission.record_id, values=submission.values)

    async def _refresh(self) -> None:
        try:
            await self.list_records()
        except ConsoleError as exc:
            _logger.warning(
                "%s list not refreshed after write: %s",
                self.descriptor.label,
                exc.message,
            )

    def _discard(self, uploaded: list[str]) -> None:
        _logger.info("Editor closed during upload; discarding %s", uploaded)
        if not self.is_open:
            self._reset_draft()
        self._enter(SubmissionState.IDLE)

    def _coerce(self, draft: RecordDraft, satisfied: set[str]) -> dict[str, object]:
        missing: list[str] = []
        invalid: dict[str, str] = {}
        values: dict[str, object] = {}
        for spec in self.descriptor.fields:
            if draft.is_blank(spec.name):
                if spec.required and spec.name not in satisfied:
                    missing.append(spec.name)
            try:
                values[spec.name] = spec.coerce(draft.get(spec.name))
            except ValueError as exc:
                invalid[spec.name] = str(exc)
        if missing or invalid:
            raise IncompleteDraft(missing, invalid)
        return values

    def _asset_field(self, name: str) -> FieldSpec:
        spec = self.descriptor.field(name)
        if spec.asset is None:
            raise KeyError(f"{name!r} is not an asset field of {self.descriptor.name}")
        return spec

    def _ensure_writable(self) -> None:
        if self.descriptor.read_only:
            raise ReadOnlyCollection(self.descriptor.collection)

    def _token(self) -> str:
        token = self.session_store.get()
        if not token:
            raise MissingCredential("session token")
        return token

    def _reset_draft(self) -> None:
        self.draft = self.descriptor.empty_draft()
        self.staged.clear()
        self.editing_id = None

    def _enter(self, state: SubmissionState) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self, exc: ConsoleError) -> None:
        self.last_error = exc
        self._enter(SubmissionState.FAILED)
        _logger.info("%s submission failed: %s", self.descriptor.label, exc.message)
        self._enter(SubmissionState.IDLE)
