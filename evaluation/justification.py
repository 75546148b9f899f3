"""
Justification Loader
File: justification.py

Purpose: Resolve a justification CID into one EvaluationResult.

A justification CID may be a comma-joined list of pages. Every page is
fetched and parsed on its own; the pages are then merged, taking scores,
labels and timestamp from the first page that reports scores.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from core.schemas.errors import FetchExhaustedError
from core.schemas.evaluation import EvaluationResult

from evaluation.fetcher import CID_LIST_DELIMITER, RetryingFetcher
from evaluation.result_parser import ResultParser

logger = logging.getLogger(__name__)

LOADING_ERROR_PREFIX = "Error loading justification"
PAGE_SEPARATOR = "\n\n"


def split_cids(cid: str | None) -> list[str]:
    """Page CIDs of a comma-joined list, blanks dropped."""
    if not cid:
        return []
    return [part.strip() for part in cid.split(CID_LIST_DELIMITER) if part.strip()]


def merge_pages(pages: Sequence[EvaluationResult]) -> EvaluationResult:
    """Combine per-page results into a single result."""
    if not pages:
        return EvaluationResult()
    if len(pages) == 1:
        page = pages[0]
        return page.model_copy(update={"pages": (page.justification_text,)})

    scored = next((p for p in pages if p.outcome_scores), None)
    timestamp = scored.timestamp if scored else next((p.timestamp for p in pages if p.timestamp), None)
    texts = tuple(p.justification_text for p in pages)
    return EvaluationResult(
        outcome_scores=scored.outcome_scores if scored else (),
        outcome_labels=scored.outcome_labels if scored else (),
        justification_text=PAGE_SEPARATOR.join(texts),
        timestamp=timestamp,
        pages=texts,
    )


class JustificationLoader:
    """
    Fetches and parses every page of a justification.

    Usage:
        loader = JustificationLoader(fetcher)
        result = await loader.load("QmPage1,QmPage2")
    """

    def __init__(self, fetcher: RetryingFetcher, parser: ResultParser | None = None) -> None:
        self.fetcher = fetcher
        self.parser = parser or ResultParser()

    async def _load_page(self, cid: str, strict: bool) -> EvaluationResult:
        try:
            data = await self.fetcher.fetch(cid)
        except (FetchExhaustedError, ValueError) as e:
            if strict:
                raise
            logger.warning("Justification page %s could not be loaded: %s", cid, e)
            return EvaluationResult(justification_text=f"{LOADING_ERROR_PREFIX}: {e}")
        return self.parser.parse(data)

    async def load(self, cid: str | None, *, strict: bool = False) -> EvaluationResult:
        """
        Load all pages of `cid`.

        With `strict` unset, a page that cannot be fetched becomes an
        explanatory placeholder text and the other pages still load.

        Raises:
            ValueError: `cid` names no page (strict only)
            FetchExhaustedError: a page could not be fetched (strict only)
        """
        cids = split_cids(cid)
        if not cids:
            if strict:
                raise ValueError("CID is required for fetching data")
            return EvaluationResult(
                justification_text=f"{LOADING_ERROR_PREFIX}: record has no justification CID",
            )

        if len(cids) > 1:
            logger.info("Loading %d justification pages", len(cids))
        pages = await asyncio.gather(*(self._load_page(c, strict) for c in cids))
        return merge_pages(pages)


__all__ = [
    "LOADING_ERROR_PREFIX",
    "JustificationLoader",
    "merge_pages",
    "split_cids",
]
