"""Shared fixtures for cbmconf tests."""

import pytest


@pytest.fixture
def conf_file(tmp_path):
    """Write `text` as raw bytes (no newline translation), return the path."""
    def _write(text: str = "", name: str = "test.conf") -> str:
        path = tmp_path / name
        path.write_bytes(text.encode("utf-8"))
        return str(path)
    return _write
