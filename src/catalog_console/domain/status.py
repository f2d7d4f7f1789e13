"""State enums for the session gate and record submissions."""

from enum import StrEnum


class GateState(StrEnum):
    """Lifecycle of the session gate within one process."""

    BOOTSTRAPPING = "BOOTSTRAPPING"
    PROMPTING = "PROMPTING"
    VERIFYING = "VERIFYING"
    AUTHENTICATED = "AUTHENTICATED"


class SubmissionState(StrEnum):
    """Steps a record submission passes through."""

    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    UPLOADING_ASSET = "UPLOADING_ASSET"
    COMPOSING = "COMPOSING"
    SUBMITTING = "SUBMITTING"
    FAILED = "FAILED"
