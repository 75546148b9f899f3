"""
IPFS Content Store

Fetches through a public IPFS gateway and uploads through a Pinata-style
pinning service.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.http import HttpClient, HttpError
from core.schemas.errors import ContentStoreError

from .base import ContentResponse

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY = "https://ipfs.io"
DEFAULT_PINNING_SERVICE = "https://api.pinata.cloud"
PIN_FILE_PATH = "/pinning/pinFileToIPFS"


class IpfsContentStore:
    """
    Content store backed by an IPFS gateway and a pinning service.

    Usage:
        async with IpfsContentStore(pinning_key="...") as store:
            cid = await store.upload(blob, "query_package.zip")
            response = await store.fetch(cid)
    """

    def __init__(
        self,
        *,
        gateway: str = DEFAULT_GATEWAY,
        pinning_service: str = DEFAULT_PINNING_SERVICE,
        pinning_key: Optional[str] = None,
        http: Optional[HttpClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.gateway = gateway.rstrip("/")
        self.pinning_service = pinning_service.rstrip("/")
        self.pinning_key = pinning_key
        self.http = http or HttpClient(timeout=timeout)

    def gateway_url(self, cid: str) -> str:
        return f"{self.gateway}/ipfs/{cid.strip()}"

    async def fetch(self, cid: str) -> ContentResponse:
        url = self.gateway_url(cid)
        logger.debug("Fetching from IPFS: %s", url)
        try:
            response = await self.http.get(url)
        except HttpError as e:
            raise ContentStoreError(f"Failed to fetch from IPFS: {e}") from e

        if not response.ok:
            raise ContentStoreError(
                f"Failed to fetch from IPFS: HTTP error! status: {response.status_code}",
                status_code=response.status_code,
                details={"cid": cid, "body": response.text[:200]},
            )
        return ContentResponse(
            cid=cid.strip(),
            content=response.content,
            content_type=response.content_type,
        )

    async def upload(self, data: bytes, filename: str) -> str:
        if not self.pinning_key:
            raise ContentStoreError("No pinning key configured (IPFS_PINNING_KEY)")

        url = f"{self.pinning_service}{PIN_FILE_PATH}"
        try:
            response = await self.http.post_file(
                url,
                field_name="file",
                filename=filename,
                data=data,
                headers={"Authorization": f"Bearer {self.pinning_key}"},
            )
        except HttpError as e:
            raise ContentStoreError(f"Failed to upload to IPFS: {e}") from e

        if not response.ok:
            logger.error("Upload failed with status %d: %s", response.status_code, response.text[:200])
            raise ContentStoreError(
                f"Upload failed with status: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            cid = response.json().get("IpfsHash")
        except (ValueError, AttributeError) as e:
            raise ContentStoreError(f"Pinning service returned an unreadable body: {e}") from e
        if not cid:
            raise ContentStoreError("Pinning service did not return an IpfsHash field")

        logger.info("Uploaded %s (%d bytes) as %s", filename, len(data), cid)
        return cid

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "IpfsContentStore":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
