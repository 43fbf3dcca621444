"""Small hashing, time and TOML helpers shared across the pipeline."""

import hashlib
import json
from datetime import UTC
from datetime import datetime
from pathlib import Path

CHUNK_SIZE = 64 * 1024


def sha256_hex(value: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 bytes of value (64 characters)."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def file_sha256(path: Path) -> str:
    """Lowercase hex SHA-256 of a file's content."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for block in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def iso8601_now() -> str:
    """Current UTC time, e.g. 2025-10-26T12:00:00.123456+00:00."""
    return datetime.now(UTC).isoformat()


def toml_string(value: str) -> str:
    """Quote value as a TOML basic string."""
    # JSON string escapes are a subset of TOML basic string escapes; TOML also forbids a raw DEL
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f")
