"""
Common test fixtures shared by all modules.

Provides factory functions and in-memory fakes for the package and
evaluation layers:
- PrimaryDocument / JuryConfig / SupportingFile / ExternalReference
- Manifest dictionaries
- FakeContentStore (content-addressed store)
- FakeLedger (evaluation contract)
- RecordingSleep (injectable sleep that never blocks)
"""

from __future__ import annotations

import asyncio
import hashlib
import json
from typing import Any, Callable, Optional, Sequence

from core.schemas.errors import ContentStoreError
from core.schemas.evaluation import EvaluationRecord
from core.schemas.package import (
    ExternalReference,
    JuryConfig,
    JuryNode,
    PrimaryDocument,
    SupportingFile,
)
from core.store import ContentResponse


# =============================================================================
# Package Factories
# =============================================================================

def make_primary_document(
    query: str = "Did the Lisbon marathon on 2026-10-11 finish under 2h05?",
    outcomes: Sequence[str] = ("Yes", "No"),
    references: Sequence[str] = (),
) -> PrimaryDocument:
    """Create a PrimaryDocument for testing."""
    return PrimaryDocument(query=query, outcomes=tuple(outcomes), references=tuple(references))


def make_jury_config(
    weights: Sequence[float] = (0.5, 0.5),
    iterations: int = 1,
    number_of_outcomes: Optional[int] = None,
) -> JuryConfig:
    """Create a JuryConfig with one node per weight."""
    models = [("OpenAI", "gpt-4o"), ("Anthropic", "claude-3-5-sonnet"), ("Open-source", "llama-3.1")]
    nodes = []
    for index, weight in enumerate(weights):
        provider, model = models[index % len(models)]
        nodes.append(JuryNode(provider=provider, model=model, runs=1, weight=weight))
    return JuryConfig(nodes=tuple(nodes), iterations=iterations, number_of_outcomes=number_of_outcomes)


def make_supporting_file(
    filename: str = "race_report.txt",
    data: bytes = b"Official results: winner crossed at 2:04:51.",
    description: str = "Race report",
    name: Optional[str] = None,
) -> SupportingFile:
    return SupportingFile(filename=filename, data=data, description=description, name=name)


def make_external_reference(
    cid: str = "QmRulebook111",
    name: str = "rulebook",
    description: str = "Course rules",
) -> ExternalReference:
    return ExternalReference(cid=cid, name=name, description=description)


def make_manifest_data(**overrides: Any) -> dict[str, Any]:
    """
    Create a valid manifest dictionary.

    Keyword overrides replace top-level keys; pass a value of None to
    remove a key.
    """
    data: dict[str, Any] = {
        "version": "1.0",
        "primary": {"filename": "primary_query.json"},
        "juryParameters": {
            "NUMBER_OF_OUTCOMES": 2,
            "AI_NODES": [
                {"AI_PROVIDER": "OpenAI", "AI_MODEL": "gpt-4o", "NO_COUNTS": 1, "WEIGHT": 0.5},
                {"AI_PROVIDER": "Anthropic", "AI_MODEL": "claude-3-5-sonnet", "NO_COUNTS": 1, "WEIGHT": 0.5},
            ],
            "ITERATIONS": 1,
        },
    }
    for key, value in overrides.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
    return data


def make_weighted_nodes(weights: Sequence[float]) -> list[dict[str, Any]]:
    return [
        {"AI_PROVIDER": "OpenAI", "AI_MODEL": f"model-{i}", "NO_COUNTS": 1, "WEIGHT": w}
        for i, w in enumerate(weights)
    ]


def make_justification(
    scores: Sequence[tuple[str, int]] = (("Yes", 700000), ("No", 300000)),
    justification: str = "Timing data confirms a 2:04:51 finish.",
    timestamp: Optional[str] = "2026-10-12T08:00:00Z",
) -> bytes:
    data: dict[str, Any] = {
        "scores": [{"outcome": o, "score": s} for o, s in scores],
        "justification": justification,
    }
    if timestamp:
        data["timestamp"] = timestamp
    return json.dumps(data).encode("utf-8")


# =============================================================================
# Fakes
# =============================================================================

class RecordingSleep:
    """Sleep replacement that records requested delays and yields once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


class FakeContentStore:
    """
    In-memory content store.

    `failures[cid] = n` makes the next n fetches of `cid` fail.
    `fetch_delay` adds a real delay to each fetch.
    """

    def __init__(
        self,
        contents: Optional[dict[str, bytes]] = None,
        failures: Optional[dict[str, int]] = None,
        fetch_delay: float = 0.0,
    ) -> None:
        self.contents = dict(contents or {})
        self.failures = dict(failures or {})
        self.fetch_delay = fetch_delay
        self.fetch_calls: list[str] = []
        self.uploads: list[tuple[str, bytes]] = []

    async def fetch(self, cid: str) -> ContentResponse:
        self.fetch_calls.append(cid)
        if self.fetch_delay:
            await asyncio.sleep(self.fetch_delay)
        if self.failures.get(cid, 0) > 0:
            self.failures[cid] -= 1
            raise ContentStoreError("HTTP error! status: 504", status_code=504)
        if cid not in self.contents:
            raise ContentStoreError("HTTP error! status: 404", status_code=404)
        return ContentResponse(cid=cid, content=self.contents[cid])

    async def upload(self, data: bytes, filename: str) -> str:
        cid = "Qm" + hashlib.sha256(data).hexdigest()[:20]
        self.uploads.append((filename, data))
        self.contents[cid] = data
        return cid


class FakeLedger:
    """
    In-memory evaluation contract.

    Records become readable once `ready_after` reads have happened, when
    `answer()` is called, or as soon as finalize starts if
    `answer_on_finalize` is set. `on_finalize` runs at the end of
    finalize_evaluation_timeout and may raise to simulate a revert.
    """

    def __init__(
        self,
        likelihoods: Sequence[int] = (700000, 300000),
        justification_cid: str = "QmJustification",
        ready_after: Optional[int] = None,
        read_errors: int = 0,
        on_finalize: Optional[Callable[["FakeLedger", str], None]] = None,
        finalize_delay: float = 0.0,
        answer_on_finalize: bool = False,
    ) -> None:
        self.likelihoods = tuple(likelihoods)
        self.justification_cid = justification_cid
        self.ready_after = ready_after
        self.read_errors = read_errors
        self.on_finalize = on_finalize
        self.finalize_delay = finalize_delay
        self.answer_on_finalize = answer_on_finalize
        self.answered = False
        self.requests: list[list[str]] = []
        self.reads = 0
        self.finalize_calls = 0

    def answer(self) -> None:
        self.answered = True

    async def request_evaluation(self, cids: Sequence[str]) -> str:
        self.requests.append(list(cids))
        return f"0x{len(self.requests):064x}"

    async def get_evaluation(self, request_id: str) -> EvaluationRecord:
        self.reads += 1
        if self.read_errors > 0:
            self.read_errors -= 1
            raise ConnectionError("RPC node unavailable")
        if self.ready_after is not None and self.reads >= self.ready_after:
            self.answered = True
        if not self.answered:
            return EvaluationRecord()
        return EvaluationRecord(
            likelihoods=self.likelihoods,
            justification_cid=self.justification_cid,
            exists=True,
        )

    async def finalize_evaluation_timeout(self, request_id: str) -> None:
        self.finalize_calls += 1
        if self.answer_on_finalize:
            self.answered = True
        if self.finalize_delay:
            await asyncio.sleep(self.finalize_delay)
        if self.on_finalize is not None:
            self.on_finalize(self, request_id)
