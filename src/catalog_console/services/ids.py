"""Record id and storage key generation."""

import random
import re
import string
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from catalog_console.domain.descriptors import EntityTypeDescriptor, IdStrategy
from catalog_console.domain.records import RecordId

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9.-]")
_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def current_millis() -> int:
    """Return the current Unix time in milliseconds."""
    return time.time_ns() // 1_000_000


def sanitize_filename(filename: str) -> str:
    """Drop every character outside ``[A-Za-z0-9.-]``."""
    return _UNSAFE_FILENAME_CHARS.sub("", filename) or "file"


def build_storage_key(namespace: str, filename: str, now_ms: int) -> str:
    """Build ``{namespace}/{millis}_{sanitized filename}``."""
    return f"{namespace}/{now_ms}_{sanitize_filename(filename)}"


def next_sequential_id(existing_ids: Iterable[object]) -> int:
    """Return one more than the largest integer id, or 1 when there is none."""
    numeric: list[int] = []
    for value in existing_ids:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            numeric.append(value)
        elif isinstance(value, str) and value.strip().isdigit():
            numeric.append(int(value))
    return max(numeric) + 1 if numeric else 1


def namespaced_id(prefix: str, now_ms: int, rng: random.Random) -> str:
    """Build ``{prefix}_{millis}_{random suffix}``."""
    suffix = "".join(rng.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}_{now_ms}_{suffix}"


@dataclass
class IdGenerator:
    """Assigns ids to new records according to a descriptor's strategy."""

    clock: Callable[[], int] = current_millis
    rng: random.Random = field(default_factory=random.Random)

    def assign(
        self, descriptor: EntityTypeDescriptor, existing_ids: Iterable[object]
    ) -> RecordId | None:
        """Return a new id, or ``None`` when the server assigns it."""
        strategy = descriptor.id_strategy
        if strategy is IdStrategy.SERVER:
            return None
        if strategy is IdStrategy.SEQUENTIAL:
            return next_sequential_id(existing_ids)
        if strategy is IdStrategy.TIMESTAMP:
            return self.clock()
        prefix = descriptor.id_prefix or descriptor.name
        return namespaced_id(prefix, self.clock(), self.rng)

    def storage_key(self, namespace: str, filename: str) -> str:
        return build_storage_key(namespace, filename, self.clock())
