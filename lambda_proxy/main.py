"""
Lambda Proxy - ALB compatible HTTP front end for a single Lambda function

Accepts any HTTP request, invokes the configured function with an
Application Load Balancer target group event, and returns the function's
response. Only one invocation is in flight at a time.
"""

import argparse
import logging
import sys
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError
from starlette.types import Receive, Scope, Send

from .config import ProxyConfig, load_config
from .core.exceptions import ConfigurationError
from .core.logging_config import setup_logging
from .core.payload_builder import get_payload_builder
from .lifecycle import manage_lifespan
from .middleware import RequestLoggerMiddleware

logger = logging.getLogger("lambda_proxy.main")


class ProxyEndpoint:
    """
    Catch-all ASGI endpoint; delegates to the handler built at startup.

    Mounted as an object rather than a function so Starlette treats it as a
    raw ASGI app, letting the handler hold its permit until the response
    has been sent.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await scope["app"].state.proxy_handler(scope, receive, send)


def create_app(proxy_config: Optional[ProxyConfig] = None) -> FastAPI:
    """
    Build the application.

    Raises:
        ConfigurationError: the integration type is not supported
    """
    if proxy_config is None:
        proxy_config = load_config()

    payload_builder = get_payload_builder(proxy_config)

    app = FastAPI(
        title="Lambda Proxy",
        version="1.0.0",
        lifespan=lambda app: manage_lifespan(app, proxy_config, payload_builder),
        # Every path belongs to the function.
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_middleware(RequestLoggerMiddleware)
    app.router.add_route("/{path:path}", ProxyEndpoint(), include_in_schema=False)
    return app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lambda-proxy",
        description="Serve HTTP by invoking a Lambda function with ALB target group events",
    )
    parser.add_argument("-f", "--function", help="Lambda function name (env: FUNCTION)")
    parser.add_argument("-l", "--listen", help="HTTP listen address (env: BIND)")
    parser.add_argument("-p", "--port", type=int, help="HTTP listen port (env: PORT)")
    parser.add_argument("-e", "--endpoint", help="Lambda API endpoint (env: ENDPOINT)")
    parser.add_argument(
        "-t", "--type", dest="api_type", help='HTTP gateway type ("alb" for ALB) (env: API_TYPE)'
    )
    parser.add_argument(
        "-m",
        "--multi-value",
        action="store_true",
        default=None,
        help="Enable multi-value headers. Effective only with -t alb (env: ALB_MULTI_VALUE)",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> ProxyConfig:
    return load_config(
        FUNCTION=args.function,
        BIND=args.listen,
        PORT=args.port,
        ENDPOINT=args.endpoint,
        API_TYPE=args.api_type,
        ALB_MULTI_VALUE=args.multi_value,
    )


def run(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        proxy_config = config_from_args(args)
    except ValidationError as e:
        raise ConfigurationError(f"Failed to parse options: {e}") from e

    setup_logging(proxy_config.LOG_CONFIG_PATH, proxy_config.LOG_LEVEL)
    logger.info("Starting Lambda Proxy")

    app = create_app(proxy_config)

    logger.info("Listening on %s", proxy_config.listen_address)
    uvicorn.run(
        app,
        host=proxy_config.listen_host,
        port=proxy_config.PORT,
        workers=1,
        log_config=None,
        access_log=False,
    )


def main(argv: Optional[List[str]] = None) -> None:
    try:
        run(argv)
    except ConfigurationError as e:
        if not logging.getLogger().handlers:
            logging.basicConfig(level=logging.INFO)
        logger.error("Error: %s", e)
        sys.exit(1)

    logger.info("Exiting Lambda Proxy")


if __name__ == "__main__":
    main()
