"""
Query Package Assembler
File: assembler.py

Purpose: Compose a primary document, supporting files and external
references into the manifest + file set consumed by the archive codec.
Performs no I/O; uploading the result is a separate step.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Sequence

from core.schemas.errors import DuplicateReferenceNameError
from core.schemas.manifest import Manifest
from core.schemas.package import (
    ExternalReference,
    JuryConfig,
    PrimaryDocument,
    SupportingFile,
)
from core.schemas.versioning import (
    IPFS_CID_TYPE,
    MANIFEST_FILENAME,
    MANIFEST_VERSION,
    PRIMARY_FILENAME,
)

from querypack.archive import ArchiveCodec, ArchiveEntry, guess_content_type
from querypack.manifest import ManifestValidator

logger = logging.getLogger(__name__)

DEFAULT_OUTCOME_COUNT = 2


@dataclass(frozen=True)
class Hyperlink:
    """A URL the jury should review alongside the query."""
    url: str
    description: str = ""


def augment_query(query: str, links: Sequence[Hyperlink] | None) -> str:
    """Append a block listing reference URLs to the query text."""
    if not links:
        return query
    lines = []
    for link in links:
        if not link.url or not link.url.strip():
            continue
        suffix = f"    {link.description}" if link.description else ""
        lines.append(f"{link.url}{suffix}")
    if not lines:
        return query
    return f"{query}\n\nReference URLs to review:\n" + "\n".join(lines)


@dataclass(frozen=True)
class AssembledPackage:
    """Manifest plus the physical files that go into the archive."""
    manifest: Manifest
    files: tuple[ArchiveEntry, ...]
    primary: PrimaryDocument

    @property
    def filenames(self) -> list[str]:
        return [f.name for f in self.files]


def _jury_parameters(jury: JuryConfig, primary: PrimaryDocument) -> dict[str, Any]:
    outcomes = jury.number_of_outcomes or len(primary.outcomes) or DEFAULT_OUTCOME_COUNT
    return {
        "NUMBER_OF_OUTCOMES": outcomes,
        "AI_NODES": [
            {
                "AI_PROVIDER": node.provider,
                "AI_MODEL": node.model,
                "NO_COUNTS": node.runs,
                "WEIGHT": node.weight,
            }
            for node in jury.nodes
        ],
        "ITERATIONS": jury.iterations,
    }


class PackageAssembler:
    """
    Builds query packages.

    Usage:
        assembler = PackageAssembler()
        package = assembler.assemble(primary, supporting, external, jury)
        blob = assembler.build_archive(primary, supporting, external, jury)
    """

    def __init__(
        self,
        *,
        codec: ArchiveCodec | None = None,
        validator: ManifestValidator | None = None,
        primary_filename: str = PRIMARY_FILENAME,
        manifest_version: str = MANIFEST_VERSION,
    ) -> None:
        self.codec = codec or ArchiveCodec()
        self.validator = validator or ManifestValidator()
        self.primary_filename = primary_filename
        self.manifest_version = manifest_version

    def assemble(
        self,
        primary: PrimaryDocument,
        supporting_files: Sequence[SupportingFile] = (),
        external_refs: Sequence[ExternalReference] = (),
        jury: JuryConfig | None = None,
        *,
        support_cids: Sequence[str] = (),
        links: Sequence[Hyperlink] | None = None,
    ) -> AssembledPackage:
        """
        Build the manifest and file set for a package.

        Raises:
            DuplicateReferenceNameError: two entries share a name, or two
                local files share an archive filename
            ManifestError: the resulting manifest is invalid (e.g. weights)
        """
        additional: list[dict[str, Any]] = []
        for index, f in enumerate(supporting_files, start=1):
            additional.append({
                "name": f.name or f"supportingFile{index}",
                "type": f.content_type or guess_content_type(f.filename),
                "filename": f.filename,
                "description": f.description,
            })
        for ref in external_refs:
            additional.append({
                "name": ref.name,
                "type": IPFS_CID_TYPE,
                "hash": ref.cid,
                "description": ref.description,
            })
        self._check_unique_names(additional, supporting_files)

        if links:
            primary = primary.model_copy(update={"query": augment_query(primary.query, links)})
        if not primary.references and additional:
            primary = primary.model_copy(
                update={"references": tuple(entry["name"] for entry in additional)}
            )

        data: dict[str, Any] = {
            "version": self.manifest_version,
            "primary": {"filename": self.primary_filename},
        }
        if jury is not None:
            data["juryParameters"] = _jury_parameters(jury, primary)
        if additional:
            data["additional"] = additional
        if support_cids:
            data["support"] = [{"hash": cid.strip()} for cid in support_cids]

        manifest = self.validator.parse(data)

        primary_bytes = json.dumps(primary.to_dict(), indent=2).encode("utf-8")
        files = [ArchiveEntry(self.primary_filename, primary_bytes, "application/json")]
        files.extend(
            ArchiveEntry(f.filename, f.data, f.content_type or guess_content_type(f.filename))
            for f in supporting_files
        )
        logger.debug(
            "Assembled package: %d local files, %d additional entries",
            len(files), len(additional),
        )
        return AssembledPackage(manifest=manifest, files=tuple(files), primary=primary)

    def _check_unique_names(
        self,
        additional: list[dict[str, Any]],
        supporting_files: Sequence[SupportingFile],
    ) -> None:
        seen: set[str] = set()
        for entry in additional:
            if entry["name"] in seen:
                raise DuplicateReferenceNameError(entry["name"])
            seen.add(entry["name"])

        filenames = {self.primary_filename, MANIFEST_FILENAME}
        for f in supporting_files:
            if f.filename in filenames:
                raise DuplicateReferenceNameError(f.filename)
            filenames.add(f.filename)

    def build_archive(
        self,
        primary: PrimaryDocument,
        supporting_files: Sequence[SupportingFile] = (),
        external_refs: Sequence[ExternalReference] = (),
        jury: JuryConfig | None = None,
        **kwargs: Any,
    ) -> bytes:
        """Assemble and serialize a package in one step."""
        package = self.assemble(primary, supporting_files, external_refs, jury, **kwargs)
        return self.codec.create(package.files, package.manifest)


__all__ = [
    "Hyperlink",
    "AssembledPackage",
    "PackageAssembler",
    "augment_query",
]
