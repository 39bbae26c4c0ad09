import os
from typing import Dict, List, Optional, Tuple

import pytest
from starlette.requests import Request

# Static credentials keep botocore off the network (no metadata lookups)
# and exercise the signing path.
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_EC2_METADATA_DISABLED"] = "true"
os.environ.pop("AWS_PROFILE", None)

from lambda_proxy.config import ProxyConfig  # noqa: E402

TEST_ENDPOINT = "http://lambda.test"
TEST_FUNCTION = "test-func"
INVOKE_URL = f"{TEST_ENDPOINT}/2015-03-31/functions/{TEST_FUNCTION}/invocations"


def make_request(
    method: str = "GET",
    path: str = "/",
    query_string: bytes = b"",
    headers: Optional[List[Tuple[bytes, bytes]]] = None,
    body: bytes = b"",
    client: Optional[Tuple[str, int]] = ("10.0.0.1", 54321),
    disconnect: bool = False,
) -> Request:
    """Build a Starlette Request whose receive channel yields the given body."""
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": query_string,
        "headers": list(headers or []),
        "client": client,
    }

    async def receive():
        if disconnect:
            return {"type": "http.disconnect"}
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


@pytest.fixture
def proxy_config() -> ProxyConfig:
    return ProxyConfig(
        FUNCTION=TEST_FUNCTION,
        ENDPOINT=TEST_ENDPOINT,
        AWS_REGION="us-east-1",
        API_TYPE="alb",
        ALB_MULTI_VALUE=False,
    )


@pytest.fixture
def alb_response():
    def _build(
        status_code: int = 200,
        body: str = "",
        headers: Optional[Dict[str, str]] = None,
        **extra,
    ) -> dict:
        response = {"statusCode": status_code, "body": body}
        if headers is not None:
            response["headers"] = headers
        response.update(extra)
        return response

    return _build
