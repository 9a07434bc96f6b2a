"""
Policy objects and their environment-driven defaults.
"""

import os
from dataclasses import dataclass, field
from typing import Callable, FrozenSet

from .sniff import detect_content_type

# Configuration from environment variables with sensible defaults
MAX_UPLOAD_SIZE = int(os.environ.get("REQTOOLS_MAX_UPLOAD_SIZE", 1024 * 1024 * 1024))  # 1GiB default
MAX_JSON_SIZE = int(os.environ.get("REQTOOLS_MAX_JSON_SIZE", 1024 * 1024))  # 1MiB default
ALLOWED_TYPES = os.environ.get("REQTOOLS_ALLOWED_TYPES", "")


def parse_types(value):
    """Split a comma-separated list of MIME types, dropping blanks."""
    return frozenset(t.strip() for t in value.split(",") if t.strip())


@dataclass(frozen=True)
class UploadPolicy:
    """
    Limits applied to one multipart upload.

    An empty ``allowed_content_types`` accepts every sniffed type. Matching
    is case-insensitive and exact; no wildcards.
    """

    max_total_bytes: int = MAX_UPLOAD_SIZE
    allowed_content_types: FrozenSet[str] = field(default_factory=lambda: parse_types(ALLOWED_TYPES))
    rename_on_store: bool = True
    classifier: Callable[[bytes], str] = detect_content_type

    def __post_init__(self):
        object.__setattr__(self, "allowed_content_types", frozenset(self.allowed_content_types))

    def allows(self, content_type):
        if not self.allowed_content_types:
            return True
        wanted = content_type.casefold()
        return any(wanted == t.casefold() for t in self.allowed_content_types)


@dataclass(frozen=True)
class JSONPolicy:
    """Limits applied when decoding a JSON request body."""

    max_body_bytes: int = MAX_JSON_SIZE
    allow_unknown_fields: bool = False
