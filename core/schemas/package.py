"""
Module 01 - Schemas
File: package.py

Purpose: Typed values flowing into the package assembler and out of the
package reader.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .manifest import AdditionalEntry, Manifest, SupportEntry


class PrimaryDocument(BaseModel):
    """The distinguished content entry: the question and its outcomes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    query: str = Field(..., min_length=1)
    references: tuple[str, ...] = ()
    outcomes: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "references": list(self.references),
            "outcomes": list(self.outcomes),
        }


class PrimaryDecode(BaseModel):
    """
    Result of decoding the primary file.

    `kind` records which grammar matched; `document` is the same normalized
    value in both cases.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["json", "line_grammar"]
    document: PrimaryDocument


class SupportingFile(BaseModel):
    """A local file to bundle inside the package."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1)
    data: bytes
    description: str = ""
    content_type: str | None = None
    # Manifest entry name; defaults to supportingFile<N>
    name: str | None = None


class ExternalReference(BaseModel):
    """A document already in the content store, referenced by CID."""

    model_config = ConfigDict(frozen=True)

    cid: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""

    @field_validator("cid")
    @classmethod
    def strip_cid(cls, v: str) -> str:
        return v.strip()


class JuryNode(BaseModel):
    """A juror as configured by the caller."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    runs: int = Field(default=1, gt=0)
    weight: float = Field(..., ge=0.0, le=1.0)


class JuryConfig(BaseModel):
    """Caller-side jury configuration."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[JuryNode, ...] = Field(..., min_length=1)
    iterations: int = Field(default=1, gt=0)
    # Defaults to the number of outcome labels when unset
    number_of_outcomes: int | None = Field(default=None, gt=0)


DEFAULT_JURY_NODE = JuryNode(provider="OpenAI", model="gpt-4", runs=1, weight=1.0)


class AdditionalFile(BaseModel):
    """An `additional` manifest entry with its archive bytes, if local."""

    model_config = ConfigDict(frozen=True)

    entry: AdditionalEntry
    content: bytes | None = None


class PackageDetails(BaseModel):
    """Everything a consumer needs from a read package."""

    model_config = ConfigDict(frozen=True)

    query: str
    references: tuple[str, ...] = ()
    outcomes: tuple[str, ...] = ()
    number_of_outcomes: int = 2
    iterations: int = 1
    jury_nodes: tuple[JuryNode, ...] = (DEFAULT_JURY_NODE,)
    additional: tuple[AdditionalFile, ...] = ()
    support: tuple[SupportEntry, ...] = ()
    primary_format: Literal["json", "line_grammar"] = "json"
    manifest: Manifest

    def summary(self) -> dict:
        """JSON-friendly view without file bytes."""
        return {
            "query": self.query,
            "references": list(self.references),
            "outcomes": list(self.outcomes),
            "number_of_outcomes": self.number_of_outcomes,
            "iterations": self.iterations,
            "jury_nodes": [n.model_dump() for n in self.jury_nodes],
            "additional": [
                {
                    **f.entry.model_dump(exclude_none=True),
                    "bytes": len(f.content) if f.content is not None else None,
                }
                for f in self.additional
            ],
            "support": [s.hash for s in self.support],
            "primary_format": self.primary_format,
            "manifest_version": self.manifest.version,
        }
