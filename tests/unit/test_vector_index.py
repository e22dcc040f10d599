"""Unit tests for the Pinecone index client."""

import httpx
import pytest

from luminous.core.config import Settings
from luminous.substrate.base import StoreNotConfiguredError, StoreRequestError
from luminous.substrate.vector_index import PineconeIndexClient


def index_with(handler) -> PineconeIndexClient:
    config = Settings(_env_file=None, pinecone_api_key="pk", pinecone_host="idx.svc.pinecone.io")
    return PineconeIndexClient(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
class TestPineconeIndexClient:
    """Test cases for the index liveness probe."""

    async def test_describe_index_stats(self) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"dimension": 768, "totalVectorCount": 0})

        index = index_with(handler)

        stats = await index.describe_index_stats()

        assert stats["dimension"] == 768
        assert seen[0].url.host == "idx.svc.pinecone.io"
        assert seen[0].url.path == "/describe_index_stats"
        assert seen[0].headers["Api-Key"] == "pk"

    async def test_ping_failure(self) -> None:
        index = index_with(lambda request: httpx.Response(403, json={"message": "forbidden"}))

        with pytest.raises(StoreRequestError, match="403"):
            await index.ping()

    async def test_requires_configuration(self) -> None:
        with pytest.raises(StoreNotConfiguredError):
            PineconeIndexClient(Settings(_env_file=None, pinecone_api_key="", pinecone_host=""))
