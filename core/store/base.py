"""
Content Store Interface

The content-addressed store is an external collaborator; the core only
needs its fetch and upload primitives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ContentResponse:
    """Raw bytes returned for a content identifier."""
    cid: str
    content: bytes
    content_type: str = ""


@runtime_checkable
class ContentStore(Protocol):
    """
    Capability handle for a content-addressed store.

    Implementations must be safe to call concurrently and must not mutate
    remote state on fetch.
    """

    async def fetch(self, cid: str) -> ContentResponse:
        """Return the content for `cid` or raise ContentStoreError."""
        ...

    async def upload(self, data: bytes, filename: str) -> str:
        """Pin `data` and return its content identifier."""
        ...
