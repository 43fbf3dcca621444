"""Tests for hashing, time and TOML helpers."""

import hashlib
import tomllib
from datetime import datetime

from cask.utils import file_sha256
from cask.utils import iso8601_now
from cask.utils import sha256_hex
from cask.utils import toml_string


def test_sha256_hex():
    assert sha256_hex("gpm") == hashlib.sha256(b"gpm").hexdigest()
    assert len(sha256_hex("")) == 64


def test_file_sha256(tmp_path):
    path = tmp_path / "file"
    path.write_bytes(b"x" * 200_000)

    assert file_sha256(path) == hashlib.sha256(b"x" * 200_000).hexdigest()


def test_iso8601_now_is_utc():
    """Test timestamps are ISO-8601 with a UTC offset."""
    value = iso8601_now()

    assert "T" in value
    assert datetime.fromisoformat(value).utcoffset().total_seconds() == 0


def test_toml_string_escapes():
    """Test quoted values survive a TOML round trip."""
    for value in ["plain", 'with "quotes"', "back\\slash", "new\nline", "ünïcode", "del\x7fchar", "bell\x07"]:
        assert tomllib.loads(f"key = {toml_string(value)}")["key"] == value
