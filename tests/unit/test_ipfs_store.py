"""
IPFS Content Store Tests

Gateway fetches and pinning uploads against httpx.MockTransport.
"""

import json

import httpx
import pytest

from core.http import HttpClient
from core.schemas.errors import ContentStoreError
from core.store import ContentStore, IpfsContentStore


def make_store(handler, **kwargs) -> IpfsContentStore:
    http = HttpClient(transport=httpx.MockTransport(handler))
    return IpfsContentStore(http=http, **kwargs)


# =============================================================================
# Fetch
# =============================================================================

class TestFetch:

    @pytest.mark.asyncio
    async def test_fetch_from_gateway(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=b"zip-bytes", headers={"Content-Type": "application/zip"})

        async with make_store(handler, gateway="https://gateway.example.org/") as store:
            response = await store.fetch(" QmPackage ")

        assert seen == ["https://gateway.example.org/ipfs/QmPackage"]
        assert response.cid == "QmPackage"
        assert response.content == b"zip-bytes"
        assert response.content_type == "application/zip"

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(504, text="gateway timeout")

        async with make_store(handler) as store:
            with pytest.raises(ContentStoreError) as exc_info:
                await store.fetch("QmSlow")

        assert exc_info.value.status_code == 504
        assert "504" in str(exc_info.value)
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_store(handler) as store:
            with pytest.raises(ContentStoreError, match="Failed to fetch from IPFS"):
                await store.fetch("QmAnything")

    def test_satisfies_protocol(self):
        assert isinstance(IpfsContentStore(), ContentStore)


# =============================================================================
# Upload
# =============================================================================

class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_returns_ipfs_hash(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers.get("authorization")
            captured["body"] = request.content
            return httpx.Response(200, json={"IpfsHash": "QmUploaded", "PinSize": 42})

        async with make_store(handler, pinning_key="secret-jwt") as store:
            cid = await store.upload(b"package-bytes", "query_package.zip")

        assert cid == "QmUploaded"
        assert captured["url"] == "https://api.pinata.cloud/pinning/pinFileToIPFS"
        assert captured["auth"] == "Bearer secret-jwt"
        assert b'filename="query_package.zip"' in captured["body"]
        assert b"package-bytes" in captured["body"]

    @pytest.mark.asyncio
    async def test_upload_without_key_fails(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with make_store(handler) as store:
            with pytest.raises(ContentStoreError, match="pinning key"):
                await store.upload(b"data", "a.txt")

    @pytest.mark.asyncio
    async def test_upload_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text=json.dumps({"error": "unauthorized"}))

        async with make_store(handler, pinning_key="bad") as store:
            with pytest.raises(ContentStoreError) as exc_info:
                await store.upload(b"data", "a.txt")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_upload_without_hash_field(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "ok"})

        async with make_store(handler, pinning_key="k") as store:
            with pytest.raises(ContentStoreError, match="IpfsHash"):
                await store.upload(b"data", "a.txt")
