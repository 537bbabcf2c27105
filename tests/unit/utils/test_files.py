"""Unit tests for atomic file helpers."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from zerotouch.utils.files import write_json_atomic, write_text_atomic


class TestWriteTextAtomic:
    """Tests for write_text_atomic."""

    def test_creates_parents_and_writes(self, tmp_path: Path) -> None:
        """Parent directories are created and the text is written."""
        target = tmp_path / "a" / "b" / "out.conf"

        result = write_text_atomic(target, "hello\n")

        assert result == target
        assert target.read_text(encoding="utf-8") == "hello\n"

    def test_replaces_existing_file(self, tmp_path: Path) -> None:
        """An existing file is replaced as a whole."""
        target = tmp_path / "out.conf"
        target.write_text("old content that is longer")

        write_text_atomic(target, "new")

        assert target.read_text(encoding="utf-8") == "new"

    def test_failed_rename_keeps_original_and_cleans_up(self, tmp_path: Path) -> None:
        """If the rename fails the target is untouched and no temp file remains."""
        target = tmp_path / "out.conf"
        target.write_text("original")

        with (
            patch("zerotouch.utils.files.os.replace", side_effect=OSError("disk full")),
            pytest.raises(OSError, match="disk full"),
        ):
            write_text_atomic(target, "new")

        assert target.read_text() == "original"
        assert list(tmp_path.glob("*.tmp")) == []


class TestWriteJsonAtomic:
    """Tests for write_json_atomic."""

    def test_writes_indented_json(self, tmp_path: Path) -> None:
        """Data is written as indented JSON with a trailing newline."""
        target = tmp_path / "state.json"

        write_json_atomic(target, {"campaigns": {"promo": {"fingerprint": None}}})

        text = target.read_text(encoding="utf-8")
        assert text.endswith("\n")
        assert "\n  " in text
        assert json.loads(text) == {"campaigns": {"promo": {"fingerprint": None}}}
