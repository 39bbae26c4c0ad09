"""
Proxy startup/shutdown orchestration for shared resources.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from .config import ProxyConfig
from .core.aws_auth import SigV4Signer
from .core.concurrency import ConcurrencyGate
from .core.http_client import HttpClientFactory
from .core.payload_builder import PayloadBuilder
from .services.lambda_invoker import LambdaInvoker
from .services.processor import LambdaProxyHandler

logger = logging.getLogger("lambda_proxy.main")


@asynccontextmanager
async def manage_lifespan(
    app: FastAPI, proxy_config: ProxyConfig, payload_builder: PayloadBuilder
) -> AsyncIterator[None]:
    """Create the invoke client and concurrency gate, and close them on shutdown."""
    client = HttpClientFactory(proxy_config).create_async_client()
    gate = ConcurrencyGate(default_timeout=proxy_config.QUEUE_TIMEOUT_SECONDS)

    try:
        signer = SigV4Signer.from_default_chain(proxy_config.AWS_REGION)
        invoker = LambdaInvoker(client=client, signer=signer, endpoint=proxy_config.ENDPOINT)

        app.state.config = proxy_config
        app.state.http_client = client
        app.state.gate = gate
        app.state.lambda_invoker = invoker
        app.state.proxy_handler = LambdaProxyHandler(
            invoker=invoker,
            payload_builder=payload_builder,
            gate=gate,
            function_name=proxy_config.FUNCTION,
            forwarded_port=proxy_config.PORT,
        )

        logger.info(
            "Proxying to Lambda function %s via %s",
            proxy_config.FUNCTION,
            invoker.endpoint,
        )
        yield
    finally:
        # Requests still queued at the gate are abandoned.
        await gate.close()

        logger.info("Proxy shutting down, closing http client.")
        await client.aclose()
