import logging

import httpx

from lambda_proxy.config import ProxyConfig

logger = logging.getLogger(__name__)


class HttpClientFactory:
    """
    HTTP client factory for the Lambda Invoke API client.
    """

    def __init__(self, config: ProxyConfig):
        self.config = config

    def create_async_client(self, **kwargs) -> httpx.AsyncClient:
        """
        Create an httpx.AsyncClient with configured SSL verification and timeout.

        Args:
            **kwargs: Additional arguments for httpx.AsyncClient
        """
        kwargs.setdefault("verify", self.config.VERIFY_SSL)
        # None disables every httpx timeout.
        kwargs.setdefault("timeout", self.config.LAMBDA_INVOKE_TIMEOUT)

        # At most one invocation is in flight.
        if "limits" not in kwargs:
            kwargs["limits"] = httpx.Limits(max_keepalive_connections=1, max_connections=2)
        # Avoid leaking host HTTP(S)_PROXY/NO_PROXY into the invoke call unless explicitly requested.
        kwargs.setdefault("trust_env", False)

        if not kwargs["verify"]:
            logger.warning("TLS certificate verification is disabled (VERIFY_SSL=False)")

        return httpx.AsyncClient(**kwargs)
