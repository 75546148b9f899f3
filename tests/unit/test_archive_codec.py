"""
Archive Codec Tests

Tests for the zip container:
1. Entry names and bytes survive create/extract
2. Reserved and duplicate names are rejected
3. Unreadable containers raise CorruptArchiveError
"""

import io
import json
import zipfile

import pytest

from core.schemas.errors import CorruptArchiveError, PackageError
from querypack.archive import (
    DEFAULT_MIME_TYPE,
    ArchiveCodec,
    ArchiveEntry,
    find_entry,
    guess_content_type,
)

from fixtures.common import make_manifest_data


# =============================================================================
# Create / Extract
# =============================================================================

class TestCreateExtract:
    """Test building and reading containers."""

    def test_manifest_is_written_first(self):
        codec = ArchiveCodec()
        blob = codec.create([("primary_query.json", b"{}")], make_manifest_data())

        entries = codec.extract(blob)

        assert [e.name for e in entries] == ["manifest.json", "primary_query.json"]
        assert json.loads(entries[0].text())["version"] == "1.0"

    def test_names_and_bytes_preserved_exactly(self):
        codec = ArchiveCodec()
        files = [
            ("primary_query.json", b'{"query": "q"}'),
            ("Report Final (v2).txt", b"line one\nline two\n"),
            ("report final (v2).txt", b"lowercase twin"),
            ("image.png", bytes(range(256))),
        ]
        blob = codec.create(files, make_manifest_data())

        extracted = {e.name: e.data for e in codec.extract(blob)}

        for name, data in files:
            assert extracted[name] == data

    def test_accepts_archive_entries(self):
        codec = ArchiveCodec()
        entry = ArchiveEntry("notes.txt", b"hello", "text/plain")
        blob = codec.create([entry], make_manifest_data())

        found = find_entry(codec.extract(blob), "notes.txt")

        assert found is not None
        assert found.data == b"hello"
        assert found.content_type == "text/plain"
        assert found.size == 5

    def test_same_input_gives_same_container(self):
        codec = ArchiveCodec()
        files = [("primary_query.json", b'{"query": "q"}')]

        assert codec.create(files, make_manifest_data()) == codec.create(files, make_manifest_data())

    def test_directory_entries_are_skipped(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("docs/", b"")
            zf.writestr("docs/a.txt", b"a")

        entries = ArchiveCodec().extract(buffer.getvalue())

        assert [e.name for e in entries] == ["docs/a.txt"]


# =============================================================================
# Name Rules
# =============================================================================

class TestNameRules:
    """Test rejection of colliding entry names."""

    def test_reserved_manifest_name_rejected(self):
        with pytest.raises(ValueError, match="reserved"):
            ArchiveCodec().create([("manifest.json", b"{}")], make_manifest_data())

    def test_duplicate_name_rejected(self):
        files = [("a.txt", b"1"), ("a.txt", b"2")]
        with pytest.raises(ValueError, match="Duplicate"):
            ArchiveCodec().create(files, make_manifest_data())


# =============================================================================
# Corrupt Containers
# =============================================================================

class TestCorruptContainers:
    """Test failures on unreadable input."""

    def test_not_a_zip(self):
        with pytest.raises(CorruptArchiveError) as exc_info:
            ArchiveCodec().extract(b"definitely not a zip file")

        assert exc_info.value.message.startswith("Failed to extract archive")
        assert isinstance(exc_info.value, PackageError)

    def test_truncated_zip(self):
        blob = ArchiveCodec().create([("a.txt", b"x" * 1000)], make_manifest_data())

        with pytest.raises(CorruptArchiveError):
            ArchiveCodec().extract(blob[: len(blob) // 2])

    def test_empty_bytes(self):
        with pytest.raises(CorruptArchiveError):
            ArchiveCodec().extract(b"")


# =============================================================================
# Content Types
# =============================================================================

class TestContentTypes:

    @pytest.mark.parametrize("name,expected", [
        ("notes.txt", "text/plain"),
        ("data.JSON", "application/json"),
        ("photo.jpeg", "image/jpeg"),
        ("table.csv", "text/csv"),
        ("clip.webm", "video/webm"),
        ("archive.tar.gz", DEFAULT_MIME_TYPE),
        ("README", DEFAULT_MIME_TYPE),
    ])
    def test_guess_content_type(self, name, expected):
        assert guess_content_type(name) == expected
