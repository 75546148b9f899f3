"""
Retrying Fetcher
File: fetcher.py

Purpose: Bounded-retry fetch from the content store with a fixed backoff
between attempts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from core.schemas.errors import FetchExhaustedError
from core.store import ContentResponse, ContentStore

logger = logging.getLogger(__name__)

CID_LIST_DELIMITER = ","

SleepFn = Callable[[float], Awaitable[None]]


def first_cid(cid: str) -> str:
    """First identifier of a comma-joined CID list."""
    return cid.split(CID_LIST_DELIMITER, 1)[0].strip()


class RetryingFetcher:
    """
    Fetches content by CID, retrying on any failure.

    Attempts are strictly sequential. Fetching never mutates remote state, so
    repeated calls for the same CID are safe.

    Usage:
        fetcher = RetryingFetcher(store)
        data = await fetcher.fetch(cid)
    """

    def __init__(
        self,
        store: ContentStore,
        *,
        max_retries: int = 3,
        backoff_ms: int = 2000,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.store = store
        self.max_retries = max_retries
        self.backoff_ms = backoff_ms
        self._sleep = sleep

    async def fetch_response(
        self,
        cid: str,
        *,
        max_retries: int | None = None,
        backoff_ms: int | None = None,
        is_query_package: bool = False,
    ) -> ContentResponse:
        """
        Fetch `cid`, making up to `max_retries` attempts in total.

        When `is_query_package` is set and `cid` is a comma-joined list, only
        the first identifier is dereferenced.

        Raises:
            ValueError: empty identifier
            FetchExhaustedError: every attempt failed
        """
        if not cid or not cid.strip():
            raise ValueError("CID is required for fetching data")

        retries = self.max_retries if max_retries is None else max_retries
        delay_ms = self.backoff_ms if backoff_ms is None else backoff_ms
        if retries < 1:
            raise ValueError("max_retries must be at least 1")

        target = cid.strip()
        if is_query_package and CID_LIST_DELIMITER in target:
            target = first_cid(target)
            logger.info("Query package CID list: using first CID only (%s)", target)

        last_error: BaseException | None = None
        for attempt in range(1, retries + 1):
            logger.debug("Fetching %s (attempt %d/%d)", target, attempt, retries)
            try:
                return await self.store.fetch(target)
            except Exception as e:
                last_error = e
                logger.warning("Fetch attempt %d for %s failed: %s", attempt, target, e)
            if attempt < retries:
                await self._sleep(delay_ms / 1000)

        raise FetchExhaustedError(target, retries, last_error) from last_error

    async def fetch(
        self,
        cid: str,
        *,
        max_retries: int | None = None,
        backoff_ms: int | None = None,
        is_query_package: bool = False,
    ) -> bytes:
        """Fetch `cid` and return its raw bytes."""
        response = await self.fetch_response(
            cid,
            max_retries=max_retries,
            backoff_ms=backoff_ms,
            is_query_package=is_query_package,
        )
        return response.content


__all__ = [
    "CID_LIST_DELIMITER",
    "RetryingFetcher",
    "first_cid",
]
