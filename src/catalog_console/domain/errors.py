"""Error taxonomy for console operations.

Every error here is recoverable from the operator's point of view. Input
errors block progression and re-present the input; collaborator errors are
surfaced verbatim and leave local state untouched.
"""


class ConsoleError(Exception):
    """Base class for operator-facing errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputRejected(ConsoleError):
    """Local validation failed; nothing was sent to a collaborator."""


class CollaboratorFailed(ConsoleError):
    """A remote collaborator rejected or failed a request."""


class MissingCredential(InputRejected):
    """A credential prompt was left empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field.capitalize()} is required")
        self.field = field


class AuthRequestFailed(CollaboratorFailed):
    """The credential exchange did not produce a token."""


class InvalidFileType(InputRejected):
    """The selected file's MIME type is not accepted for the field."""

    def __init__(self, mime_type: str, allowed: frozenset[str]) -> None:
        allowed_text = ", ".join(sorted(allowed))
        super().__init__(
            f"Unsupported file type {mime_type or 'unknown'!r}; "
            f"expected one of: {allowed_text}"
        )
        self.mime_type = mime_type
        self.allowed = allowed


class FileTooLarge(InputRejected):
    """The selected file exceeds the field's size limit."""

    def __init__(self, size_bytes: int, max_size_bytes: int) -> None:
        limit_mb = max_size_bytes / (1024 * 1024)
        super().__init__(f"File size must be less than {limit_mb:g}MB")
        self.size_bytes = size_bytes
        self.max_size_bytes = max_size_bytes


class UploadFailed(CollaboratorFailed):
    """The asset storage service did not confirm the upload."""


class IncompleteDraft(InputRejected):
    """A draft is missing required fields or holds values that fail coercion."""

    def __init__(
        self,
        missing_fields: list[str],
        invalid_fields: dict[str, str] | None = None,
    ) -> None:
        invalid = dict(invalid_fields or {})
        parts = []
        if missing_fields:
            parts.append("Missing required fields: " + ", ".join(missing_fields))
        for name, reason in invalid.items():
            parts.append(f"{name}: {reason}")
        super().__init__("; ".join(parts) or "Draft is incomplete")
        self.missing_fields = list(missing_fields)
        self.invalid_fields = invalid


class ReadOnlyCollection(InputRejected):
    """Mutation was attempted on a collection the console only reads."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"The {collection} collection is read-only")
        self.collection = collection


class RecordRequestFailed(CollaboratorFailed):
    """A list, create or update request to the record API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeleteRequestFailed(CollaboratorFailed):
    """A delete request to the record API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
