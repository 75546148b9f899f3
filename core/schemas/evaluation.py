"""
Module 01 - Schemas
File: evaluation.py

Purpose: Values exchanged with the ledger and produced by evaluation
retrieval.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EvaluationRequest(BaseModel):
    """
    Correlates an uploaded package with its on-chain request.

    Created once the request transaction is confirmed; held only in memory
    by the invocation that created it.
    """

    model_config = ConfigDict(frozen=True)

    cid: str
    request_id: str


class EvaluationRecord(BaseModel):
    """Ledger-resident evaluation: `(likelihoods, justificationCID, exists)`."""

    model_config = ConfigDict(frozen=True)

    likelihoods: tuple[int, ...] = ()
    justification_cid: str = ""
    exists: bool = False

    @field_validator("justification_cid")
    @classmethod
    def strip_cid(cls, v: str) -> str:
        return v.strip()

    @property
    def is_ready(self) -> bool:
        return self.exists and len(self.likelihoods) > 0

    @classmethod
    def from_tuple(cls, value: tuple | list) -> "EvaluationRecord":
        """Build from the raw `getEvaluation` return tuple."""
        likelihoods, justification_cid, exists = value
        return cls(
            likelihoods=tuple(int(x) for x in likelihoods or ()),
            justification_cid=justification_cid or "",
            exists=bool(exists),
        )


class EvaluationResult(BaseModel):
    """Parsed evaluation. Immutable once produced."""

    model_config = ConfigDict(frozen=True)

    outcome_scores: tuple[int | float, ...] = ()
    # Overrides caller-supplied labels when non-empty
    outcome_labels: tuple[str, ...] = ()
    justification_text: str = ""
    timestamp: str | None = Field(
        default=None,
        description="ISO-8601 timestamp reported by the evaluator, if any",
    )
    # One justification text per page of a comma-joined justification CID
    pages: tuple[str, ...] = ()


class EvaluationStatus(str, Enum):
    FULFILLED = "fulfilled"
    TIMED_OUT = "timed-out"


class EvaluationOutcome(BaseModel):
    """Terminal state of one evaluation race."""

    model_config = ConfigDict(frozen=True)

    status: EvaluationStatus
    request_id: str
    justification_cid: str | None = None
    result: EvaluationResult | None = None

    @property
    def fulfilled(self) -> bool:
        return self.status is EvaluationStatus.FULFILLED

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        if self.result is None:
            del data["result"]
        return data
