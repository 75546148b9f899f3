"""
Module 01 - Schemas
File: manifest.py

Purpose: Wire schema of manifest.json, the root descriptor embedded in
every query package archive.

Key names on the wire are the original upper/camel case ones
(`juryParameters`, `AI_NODES`, ...); the models expose snake_case
attributes and accept either form on input.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .versioning import MANIFEST_VERSION


class PrimaryReference(BaseModel):
    """
    Pointer to the primary document.

    Exactly one of `filename` (entry inside the archive) or `hash`
    (content identifier in the store) is set on a valid manifest.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    filename: str | None = None
    hash: str | None = None


class AINode(BaseModel):
    """One juror model and its share of the final score."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    provider: str = Field(..., alias="AI_PROVIDER")
    model: str = Field(..., alias="AI_MODEL")
    no_counts: int = Field(default=1, alias="NO_COUNTS", gt=0)
    weight: float = Field(..., alias="WEIGHT", ge=0.0, le=1.0)


class JuryParameters(BaseModel):
    """Jury configuration carried by the manifest."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    number_of_outcomes: int = Field(..., alias="NUMBER_OF_OUTCOMES", gt=0)
    ai_nodes: tuple[AINode, ...] = Field(..., alias="AI_NODES", min_length=1)
    iterations: int = Field(..., alias="ITERATIONS", gt=0)

    def total_weight(self) -> float:
        return sum(node.weight for node in self.ai_nodes)


class AdditionalEntry(BaseModel):
    """
    A file bundled in the archive (`filename`) or referenced
    in the content store (`hash`).
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(..., min_length=1)
    filename: str | None = None
    hash: str | None = None
    type: str | None = None
    description: str = ""

    @property
    def is_local(self) -> bool:
        return self.filename is not None


class SupportEntry(BaseModel):
    """Pure external reference, no local bytes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    hash: str = Field(..., min_length=1)


class Manifest(BaseModel):
    """Root descriptor of a query package. Never mutated after creation."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    version: str = Field(default=MANIFEST_VERSION, min_length=1)
    primary: PrimaryReference
    jury_parameters: JuryParameters | None = Field(default=None, alias="juryParameters")
    additional: tuple[AdditionalEntry, ...] | None = None
    support: tuple[SupportEntry, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the wire key names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def local_filenames(self) -> list[str]:
        """Archive entry names this manifest expects to resolve."""
        names = []
        if self.primary.filename:
            names.append(self.primary.filename)
        for entry in self.additional or ():
            if entry.filename:
                names.append(entry.filename)
        return names


__all__ = [
    "PrimaryReference",
    "AINode",
    "JuryParameters",
    "AdditionalEntry",
    "SupportEntry",
    "Manifest",
]
