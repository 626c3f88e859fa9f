"""Unit tests for shared utility functions (appforge.utils).

Tests cover:
- slugify for project names
- timestamp format for task log lines
- load_json / save_json
- ensure_dir
- write_generated_files materialisation and path safety
- format_duration
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from appforge.models import FileKind, GeneratedFile, GenerationResult
from appforge.utils import (
    ensure_dir,
    format_duration,
    load_json,
    save_json,
    slugify,
    timestamp,
    write_generated_files,
)


# ---------------------------------------------------------------------------
# slugify / timestamp
# ---------------------------------------------------------------------------


class TestSlugify:
    @pytest.mark.unit
    def test_simple_name(self):
        assert slugify("My Cool App") == "my-cool-app"

    @pytest.mark.unit
    def test_special_chars(self):
        assert slugify("  2FA (TOTP)  ") == "2fa-totp"

    @pytest.mark.unit
    def test_underscores_preserved(self):
        assert slugify("field_notes") == "field_notes"

    @pytest.mark.unit
    def test_consecutive_hyphens_collapsed(self):
        assert slugify("a -- b") == "a-b"

    @pytest.mark.unit
    def test_empty_string(self):
        assert slugify("!!!") == ""


class TestTimestamp:
    @pytest.mark.unit
    def test_format(self):
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", timestamp())


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


class TestJsonIO:
    @pytest.mark.unit
    def test_load_json_dict(self, tmp_path: Path):
        filepath = tmp_path / "test.json"
        filepath.write_text(json.dumps({"key": "value", "number": 42}))
        assert load_json(filepath) == {"key": "value", "number": 42}

    @pytest.mark.unit
    def test_load_json_list_wraps_in_dict(self, tmp_path: Path):
        filepath = tmp_path / "test.json"
        filepath.write_text(json.dumps([1, 2, 3]))
        assert load_json(filepath) == {"_root": [1, 2, 3]}

    @pytest.mark.unit
    def test_load_json_file_not_found(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_json_creates_parents(self, tmp_path: Path):
        filepath = tmp_path / "deep" / "nested" / "output.json"
        await save_json({"test": True}, filepath)
        assert json.loads(filepath.read_text()) == {"test": True}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_json_pretty_printed(self, tmp_path: Path):
        filepath = tmp_path / "output.json"
        await save_json({"key": "value"}, filepath)
        text = filepath.read_text()
        assert "\n" in text
        assert "  " in text


class TestEnsureDir:
    @pytest.mark.unit
    def test_creates_new_dir(self, tmp_path: Path):
        new_dir = tmp_path / "new" / "nested" / "dir"
        result = ensure_dir(new_dir)
        assert new_dir.is_dir()
        assert result == new_dir.resolve()

    @pytest.mark.unit
    def test_existing_dir_no_error(self, tmp_path: Path):
        existing = tmp_path / "existing"
        existing.mkdir()
        assert ensure_dir(existing) == existing.resolve()


# ---------------------------------------------------------------------------
# write_generated_files
# ---------------------------------------------------------------------------


class TestWriteGeneratedFiles:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_writes_files_and_directories(self, tmp_path: Path):
        result = GenerationResult(
            files=[
                GeneratedFile(path="assets", kind=FileKind.DIRECTORY),
                GeneratedFile(path="src/main.ts", content="console.log('hi');\n"),
                GeneratedFile(path="package.json", content="{}\n"),
            ]
        )
        written = await write_generated_files(result, tmp_path)

        assert written == [tmp_path / "assets", tmp_path / "src" / "main.ts", tmp_path / "package.json"]
        assert (tmp_path / "assets").is_dir()
        assert (tmp_path / "src" / "main.ts").read_text() == "console.log('hi');\n"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejects_parent_traversal(self, tmp_path: Path):
        result = GenerationResult(files=[GeneratedFile(path="../escape.txt", content="x")])
        with pytest.raises(ValueError, match="outside the output root"):
            await write_generated_files(result, tmp_path / "root")
        assert not (tmp_path / "escape.txt").exists()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejects_absolute_path(self, tmp_path: Path):
        result = GenerationResult(files=[GeneratedFile(path="/etc/passwd", content="x")])
        with pytest.raises(ValueError):
            await write_generated_files(result, tmp_path)


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.unit
    def test_seconds_only(self):
        assert format_duration(3.7) == "3.7s"

    @pytest.mark.unit
    def test_minutes_and_seconds(self):
        assert format_duration(65.2) == "1m 5s"

    @pytest.mark.unit
    def test_hours_minutes_seconds(self):
        assert format_duration(3661.0) == "1h 1m 1s"

    @pytest.mark.unit
    def test_negative(self):
        assert format_duration(-5.0) == "0.0s"
