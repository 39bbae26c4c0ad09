import httpx
import pytest

from lambda_proxy.config import ProxyConfig
from lambda_proxy.core.http_client import HttpClientFactory


@pytest.mark.asyncio
async def test_create_async_client_defaults():
    factory = HttpClientFactory(ProxyConfig(LAMBDA_INVOKE_TIMEOUT=5.0))

    async with factory.create_async_client() as client:
        assert isinstance(client, httpx.AsyncClient)
        assert client.timeout.read == 5.0
        assert client.trust_env is False


@pytest.mark.asyncio
async def test_create_async_client_without_timeout():
    factory = HttpClientFactory(ProxyConfig())

    async with factory.create_async_client() as client:
        assert client.timeout.read is None
        assert client.timeout.connect is None
