"""
Package Reader Tests

Tests for reading extracted packages:
1. Assembled packages read back to the same content
2. Primary decoding (JSON and QUERY:/REF: lines)
3. Structural failures
"""

import io
import json
import zipfile

import pytest

from core.schemas.errors import (
    CorruptArchiveError,
    MissingManifestError,
    MissingReferentError,
    PrimaryDocumentError,
    UnsupportedPrimaryReferenceError,
)
from core.schemas.package import DEFAULT_JURY_NODE
from querypack.archive import ArchiveCodec
from querypack.assembler import PackageAssembler
from querypack.reader import PackageReader, decode_primary

from fixtures.common import (
    make_external_reference,
    make_jury_config,
    make_manifest_data,
    make_primary_document,
    make_supporting_file,
)


def _archive(primary_bytes: bytes, manifest=None, extra=()):
    files = [("primary_query.json", primary_bytes), *extra]
    return ArchiveCodec().create(files, manifest or make_manifest_data())


# =============================================================================
# Round Trip
# =============================================================================

class TestRoundTrip:
    """Reading an assembled package gives back what went in."""

    def test_assembled_package_reads_back(self):
        primary = make_primary_document(outcomes=("Yes", "No"))
        report = make_supporting_file(data=b"report bytes")
        blob = PackageAssembler().build_archive(
            primary, [report], [make_external_reference()], make_jury_config(weights=(0.25, 0.75), iterations=2),
        )

        details = PackageReader().read_archive(blob)

        assert details.query == primary.query
        assert details.outcomes == ("Yes", "No")
        assert details.references == ("supportingFile1", "rulebook")
        assert details.number_of_outcomes == 2
        assert details.iterations == 2
        assert [(n.provider, n.weight) for n in details.jury_nodes] == [
            ("OpenAI", 0.25), ("Anthropic", 0.75),
        ]
        local, remote = details.additional
        assert local.content == b"report bytes"
        assert local.entry.description == "Race report"
        assert remote.content is None
        assert remote.entry.hash == "QmRulebook111"
        assert details.primary_format == "json"

    def test_defaults_without_jury(self):
        blob = PackageAssembler().build_archive(make_primary_document())

        details = PackageReader().read_archive(blob)

        assert details.number_of_outcomes == 2
        assert details.iterations == 1
        assert details.jury_nodes == (DEFAULT_JURY_NODE,)
        assert details.additional == ()
        assert details.support == ()

    def test_summary_is_json_serializable(self):
        blob = PackageAssembler().build_archive(
            make_primary_document(), [make_supporting_file()], support_cids=["QmSupport"],
        )

        summary = PackageReader().read_archive(blob).summary()

        json.dumps(summary)
        assert summary["support"] == ["QmSupport"]
        assert summary["additional"][0]["bytes"] == len(make_supporting_file().data)


# =============================================================================
# Primary Decoding
# =============================================================================

class TestDecodePrimary:

    def test_json_primary(self):
        decoded = decode_primary(b'{"query": "Who won?", "references": ["a"], "outcomes": ["X", "Y"]}')

        assert decoded.kind == "json"
        assert decoded.document.query == "Who won?"
        assert decoded.document.references == ("a",)

    def test_line_grammar_fallback(self):
        text = b"QUERY:\nQUERY: Did it rain in Porto?\nQUERY: ignored\nREF: forecast\nREF: gauge\n"

        decoded = decode_primary(text)

        assert decoded.kind == "line_grammar"
        assert decoded.document.query == "Did it rain in Porto?"
        assert decoded.document.references == ("forecast", "gauge")
        assert decoded.document.outcomes == ()

    def test_line_grammar_without_query(self):
        with pytest.raises(PrimaryDocumentError, match="No QUERY"):
            decode_primary(b"REF: something\n")

    def test_json_without_query(self):
        with pytest.raises(PrimaryDocumentError, match="No QUERY"):
            decode_primary(b'{"outcomes": ["Yes", "No"]}')

    def test_reader_reports_line_grammar(self):
        blob = _archive(b"QUERY: Did it rain in Porto?\nREF: forecast\n")

        details = PackageReader().read_archive(blob)

        assert details.query == "Did it rain in Porto?"
        assert details.primary_format == "line_grammar"


# =============================================================================
# Failures
# =============================================================================

class TestReadFailures:

    def test_missing_manifest(self):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("primary_query.json", b'{"query": "q"}')

        with pytest.raises(MissingManifestError):
            PackageReader().read_archive(buffer.getvalue())

    def test_hash_primary_unsupported(self):
        blob = ArchiveCodec().create([], make_manifest_data(primary={"hash": "QmPrimary"}))

        with pytest.raises(UnsupportedPrimaryReferenceError) as exc_info:
            PackageReader().read_archive(blob)

        assert exc_info.value.hash_ref == "QmPrimary"

    def test_missing_primary_file(self):
        blob = ArchiveCodec().create([("other.json", b"{}")], make_manifest_data())

        with pytest.raises(MissingReferentError) as exc_info:
            PackageReader().read_archive(blob)

        assert exc_info.value.filename == "primary_query.json"

    def test_missing_additional_file(self):
        manifest = make_manifest_data(additional=[
            {"name": "report", "filename": "report.txt", "type": "text/plain"},
        ])
        blob = _archive(b'{"query": "q"}', manifest=manifest)

        with pytest.raises(MissingReferentError, match="report.txt"):
            PackageReader().read_archive(blob)

    def test_corrupt_container(self):
        with pytest.raises(CorruptArchiveError):
            PackageReader().read_archive(b"PK\x03\x04garbage")
