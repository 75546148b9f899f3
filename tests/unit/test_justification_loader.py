"""
Justification Loader Tests

Multi-page justification CIDs: splitting, per-page fetch and merging.
"""

import pytest

from core.schemas.errors import FetchExhaustedError
from core.schemas.evaluation import EvaluationResult
from evaluation.fetcher import RetryingFetcher
from evaluation.justification import (
    LOADING_ERROR_PREFIX,
    JustificationLoader,
    merge_pages,
    split_cids,
)

from fixtures.common import FakeContentStore, make_justification


def make_loader(store):
    return JustificationLoader(RetryingFetcher(store, max_retries=2, backoff_ms=0))


class TestSplitCids:

    @pytest.mark.parametrize("cid,expected", [
        ("QmA", ["QmA"]),
        (" QmA , QmB ", ["QmA", "QmB"]),
        ("QmA,,QmB,", ["QmA", "QmB"]),
        ("  ", []),
        ("", []),
        (None, []),
    ])
    def test_split(self, cid, expected):
        assert split_cids(cid) == expected


class TestMergePages:

    def test_scores_from_first_scored_page(self):
        pages = [
            EvaluationResult(justification_text="Intro"),
            EvaluationResult(
                outcome_scores=(1, 2),
                outcome_labels=("Yes", "No"),
                justification_text="Scored",
                timestamp="2026-10-12T08:00:00Z",
            ),
            EvaluationResult(outcome_scores=(9, 9), justification_text="Later"),
        ]

        merged = merge_pages(pages)

        assert merged.outcome_scores == (1, 2)
        assert merged.outcome_labels == ("Yes", "No")
        assert merged.timestamp == "2026-10-12T08:00:00Z"
        assert merged.pages == ("Intro", "Scored", "Later")
        assert merged.justification_text == "Intro\n\nScored\n\nLater"

    def test_single_page_keeps_text(self):
        merged = merge_pages([EvaluationResult(justification_text="Only page")])

        assert merged.justification_text == "Only page"
        assert merged.pages == ("Only page",)


class TestLoad:

    @pytest.mark.asyncio
    async def test_two_pages(self):
        store = FakeContentStore({
            "QmP1": make_justification(justification="Page one."),
            "QmP2": b"Page two.",
        })

        result = await make_loader(store).load("QmP1,QmP2")

        assert sorted(store.fetch_calls) == ["QmP1", "QmP2"]
        assert result.pages == ("Page one.", "Page two.")
        assert result.outcome_scores == (700000, 300000)

    @pytest.mark.asyncio
    async def test_lenient_missing_page(self):
        store = FakeContentStore({"QmP1": b"Page one."})

        result = await make_loader(store).load("QmP1,QmMissing")

        assert result.pages[0] == "Page one."
        assert result.pages[1].startswith(LOADING_ERROR_PREFIX)

    @pytest.mark.asyncio
    async def test_strict_missing_page_raises(self):
        store = FakeContentStore({"QmP1": b"Page one."})

        with pytest.raises(FetchExhaustedError) as exc_info:
            await make_loader(store).load("QmP1,QmMissing", strict=True)

        assert exc_info.value.cid == "QmMissing"

    @pytest.mark.asyncio
    async def test_blank_cid(self):
        store = FakeContentStore()
        loader = make_loader(store)

        result = await loader.load("  ")

        assert result.justification_text.startswith(LOADING_ERROR_PREFIX)
        with pytest.raises(ValueError):
            await loader.load(" , ", strict=True)
        assert store.fetch_calls == []
