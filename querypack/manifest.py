"""
Query Package Manifest
File: manifest.py

Purpose: Interpret manifest.json and enforce its structural invariants.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from core.schemas.errors import ManifestError, MissingReferentError
from core.schemas.manifest import Manifest
from core.schemas.versioning import WEIGHT_SUM_TOLERANCE

logger = logging.getLogger(__name__)

JURY_REQUIRED_KEYS = ("NUMBER_OF_OUTCOMES", "AI_NODES", "ITERATIONS")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _describe_validation_error(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")


class ManifestValidator:
    """
    Stateless validator for manifest data.

    Checks run in a fixed order and stop at the first failure:
    1. `version` and `primary` present
    2. `primary` has exactly one of `filename` / `hash`
    3. `juryParameters`, when present, has non-empty
       NUMBER_OF_OUTCOMES, AI_NODES and ITERATIONS
    4. AI node weights sum to 1.0 within tolerance
    """

    def __init__(self, *, weight_tolerance: float = WEIGHT_SUM_TOLERANCE) -> None:
        self.weight_tolerance = weight_tolerance

    def validate(self, manifest: Mapping[str, Any] | Manifest) -> None:
        """Raise ManifestError describing the first violated invariant."""
        data = manifest.to_dict() if isinstance(manifest, Manifest) else manifest
        if not isinstance(data, Mapping):
            raise ManifestError("manifest must be a JSON object")

        if not data.get("version") or not data.get("primary"):
            raise ManifestError('missing required fields "version" or "primary"')

        primary = data["primary"]
        if not isinstance(primary, Mapping):
            raise ManifestError('"primary" must be an object')
        has_filename = bool(primary.get("filename"))
        has_hash = bool(primary.get("hash"))
        if has_filename == has_hash:
            raise ManifestError('primary must have either "filename" or "hash", but not both')

        jury = data.get("juryParameters")
        if jury is not None:
            if not isinstance(jury, Mapping):
                raise ManifestError('"juryParameters" must be an object')
            missing = [key for key in JURY_REQUIRED_KEYS if not jury.get(key)]
            if missing:
                raise ManifestError(
                    f"invalid jury parameters: missing {', '.join(missing)}",
                    details={"missing": missing},
                )
            self._check_weights(jury["AI_NODES"])

    def _check_weights(self, nodes: Any) -> None:
        if not isinstance(nodes, list):
            raise ManifestError('"AI_NODES" must be a list')
        total = 0.0
        for index, node in enumerate(nodes):
            weight = node.get("WEIGHT") if isinstance(node, Mapping) else None
            if not _is_number(weight):
                raise ManifestError(f"AI_NODES[{index}] has no numeric WEIGHT")
            total += weight
        if abs(total - 1.0) > self.weight_tolerance:
            raise ManifestError(
                "AI node weights must sum to 1.0",
                details={"total_weight": total},
            )

    def parse(self, raw: bytes | str | Mapping[str, Any]) -> Manifest:
        """Decode, validate and type a manifest."""
        if isinstance(raw, (bytes, str)):
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ManifestError(f"manifest.json is not valid JSON ({e})") from e
        else:
            data = raw

        self.validate(data)
        try:
            return Manifest.model_validate(data)
        except ValidationError as e:
            raise ManifestError(_describe_validation_error(e)) from e

    def check_referents(self, manifest: Manifest, entry_names: Iterable[str]) -> None:
        """Every local filename in the manifest must name an archive entry."""
        available = set(entry_names)
        if manifest.primary.filename and manifest.primary.filename not in available:
            raise MissingReferentError(manifest.primary.filename, role="primary")
        for entry in manifest.additional or ():
            if entry.filename and entry.filename not in available:
                raise MissingReferentError(entry.filename, role="additional")


__all__ = [
    "JURY_REQUIRED_KEYS",
    "ManifestValidator",
]
