"""
Query Package Reader
File: reader.py

Purpose: Locate manifest + primary document in an extracted file set and
project them into a PackageDetails value.
"""

from __future__ import annotations

import json
import logging
from typing import Sequence

from core.schemas.errors import (
    MissingManifestError,
    MissingReferentError,
    PrimaryDocumentError,
    UnsupportedPrimaryReferenceError,
)
from core.schemas.manifest import Manifest
from core.schemas.package import (
    DEFAULT_JURY_NODE,
    AdditionalFile,
    JuryNode,
    PackageDetails,
    PrimaryDecode,
    PrimaryDocument,
)
from core.schemas.versioning import MANIFEST_FILENAME

from querypack.archive import ArchiveCodec, ArchiveEntry, find_entry
from querypack.manifest import ManifestValidator

logger = logging.getLogger(__name__)

DEFAULT_NUMBER_OF_OUTCOMES = 2
DEFAULT_ITERATIONS = 1

QUERY_PREFIX = "QUERY:"
REF_PREFIX = "REF:"


def _as_strings(value: object, field_name: str, filename: str | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise PrimaryDocumentError(f'"{field_name}" must be a list', filename=filename)
    return tuple(str(item) for item in value)


def _decode_line_grammar(text: str, filename: str | None) -> PrimaryDocument:
    query = None
    references = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith(QUERY_PREFIX):
            value = stripped[len(QUERY_PREFIX):].strip()
            if value and query is None:
                query = value
        elif stripped.startswith(REF_PREFIX):
            references.append(stripped[len(REF_PREFIX):].strip())
    if not query:
        raise PrimaryDocumentError("No QUERY found in primary file", filename=filename)
    return PrimaryDocument(query=query, references=tuple(references))


def decode_primary(data: bytes, filename: str | None = None) -> PrimaryDecode:
    """
    Decode primary file bytes.

    JSON objects are read directly; anything that is not JSON is read with
    the line grammar (`QUERY: ...` once, `REF: ...` per reference).
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise PrimaryDocumentError(f"Primary file is not UTF-8 text: {e}", filename=filename) from e

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return PrimaryDecode(kind="line_grammar", document=_decode_line_grammar(text, filename))

    if not isinstance(parsed, dict) or not parsed.get("query"):
        raise PrimaryDocumentError("No QUERY found in primary file", filename=filename)
    document = PrimaryDocument(
        query=str(parsed["query"]),
        references=_as_strings(parsed.get("references"), "references", filename),
        outcomes=_as_strings(parsed.get("outcomes"), "outcomes", filename),
    )
    return PrimaryDecode(kind="json", document=document)


class PackageReader:
    """
    Reads extracted query packages.

    Usage:
        reader = PackageReader()
        details = reader.read(ArchiveCodec().extract(blob))
    """

    def __init__(
        self,
        *,
        codec: ArchiveCodec | None = None,
        validator: ManifestValidator | None = None,
    ) -> None:
        self.codec = codec or ArchiveCodec()
        self.validator = validator or ManifestValidator()

    def read_manifest(self, files: Sequence[ArchiveEntry]) -> Manifest:
        entry = find_entry(files, MANIFEST_FILENAME)
        if entry is None:
            raise MissingManifestError(MANIFEST_FILENAME)
        return self.validator.parse(entry.data)

    def read(self, files: Sequence[ArchiveEntry]) -> PackageDetails:
        """
        Project an extracted file set into PackageDetails.

        Raises:
            MissingManifestError: no manifest.json entry
            ManifestError: manifest violates the schema
            UnsupportedPrimaryReferenceError: primary is hash-addressed
            MissingReferentError: a manifest filename is not in the archive
            PrimaryDocumentError: the primary file carries no query
        """
        manifest = self.read_manifest(files)

        if manifest.primary.hash:
            raise UnsupportedPrimaryReferenceError(manifest.primary.hash)
        self.validator.check_referents(manifest, (f.name for f in files))

        primary_name = manifest.primary.filename
        primary_entry = find_entry(files, primary_name)
        if primary_entry is None:
            raise MissingReferentError(primary_name, role="primary")
        decoded = decode_primary(primary_entry.data, primary_name)
        logger.debug("Primary %s decoded as %s", primary_name, decoded.kind)

        additional = []
        for entry in manifest.additional or ():
            content = None
            if entry.filename:
                content = find_entry(files, entry.filename).data
            additional.append(AdditionalFile(entry=entry, content=content))

        jury = manifest.jury_parameters
        if jury is not None:
            nodes = tuple(
                JuryNode(provider=n.provider, model=n.model, runs=n.no_counts, weight=n.weight)
                for n in jury.ai_nodes
            )
        else:
            nodes = (DEFAULT_JURY_NODE,)

        return PackageDetails(
            query=decoded.document.query,
            references=decoded.document.references,
            outcomes=decoded.document.outcomes,
            number_of_outcomes=jury.number_of_outcomes if jury else DEFAULT_NUMBER_OF_OUTCOMES,
            iterations=jury.iterations if jury else DEFAULT_ITERATIONS,
            jury_nodes=nodes,
            additional=tuple(additional),
            support=manifest.support or (),
            primary_format=decoded.kind,
            manifest=manifest,
        )

    def read_archive(self, container: bytes) -> PackageDetails:
        """Extract and read a package container."""
        return self.read(self.codec.extract(container))


__all__ = [
    "DEFAULT_NUMBER_OF_OUTCOMES",
    "DEFAULT_ITERATIONS",
    "PackageReader",
    "decode_primary",
]
