"""
Content Store Module

Interface and IPFS implementation of the content-addressed store.
"""

from .base import ContentResponse, ContentStore
from .ipfs import DEFAULT_GATEWAY, DEFAULT_PINNING_SERVICE, IpfsContentStore

__all__ = [
    "ContentResponse",
    "ContentStore",
    "DEFAULT_GATEWAY",
    "DEFAULT_PINNING_SERVICE",
    "IpfsContentStore",
]
