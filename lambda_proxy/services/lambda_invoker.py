"""
Lambda Invoker Service

Sends synchronous (RequestResponse) Invoke API requests to the Lambda service
or to an endpoint override such as a local emulator.
"""

import logging
from typing import Optional, Tuple
from urllib.parse import quote

import httpx

from lambda_proxy.core.aws_auth import SigV4Signer
from lambda_proxy.core.exceptions import LambdaInvokeError
from lambda_proxy.models.result import InvocationResult

logger = logging.getLogger("lambda_proxy.lambda_invoker")


def default_endpoint(region: str) -> str:
    return f"https://lambda.{region}.amazonaws.com"


class LambdaInvoker:
    def __init__(
        self,
        client: httpx.AsyncClient,
        signer: SigV4Signer,
        endpoint: Optional[str] = None,
    ):
        """
        Args:
            client: Shared httpx.AsyncClient
            signer: SigV4Signer for the target region
            endpoint: Lambda API endpoint override; regional AWS endpoint if empty
        """
        self.client = client
        self.signer = signer
        self.endpoint = (endpoint or default_endpoint(signer.region)).rstrip("/")

    def invocation_url(self, function_name: str) -> str:
        return f"{self.endpoint}/2015-03-31/functions/{quote(function_name, safe='')}/invocations"

    async def invoke_function(self, function_name: str, payload: bytes) -> InvocationResult:
        """
        Invoke the function synchronously.

        Args:
            function_name: Function name, ARN, or name:qualifier
            payload: Event JSON

        Returns:
            InvocationResult with the function's payload and error signal

        Raises:
            LambdaInvokeError: connection failure or Invoke API error status
        """
        url = self.invocation_url(function_name)
        headers = self.signer.sign(
            "POST",
            url,
            payload,
            {
                "Content-Type": "application/json",
                "X-Amz-Invocation-Type": "RequestResponse",
            },
        )

        logger.debug(f"Invoking {function_name} at {url}")

        try:
            response = await self.client.post(url, content=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error(
                f"Lambda invocation failed for function '{function_name}'",
                extra={
                    "function_name": function_name,
                    "target_url": url,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise LambdaInvokeError(function_name, str(e) or type(e).__name__) from e

        if not response.is_success:
            error_type, detail = parse_api_error(response)
            logger.error(
                f"Lambda API returned {response.status_code} for function '{function_name}'",
                extra={
                    "function_name": function_name,
                    "status": response.status_code,
                    "error_type": error_type,
                    "error_detail": detail,
                },
            )
            raise LambdaInvokeError(
                function_name, detail, status_code=response.status_code, error_type=error_type
            )

        return InvocationResult(
            status_code=response.status_code,
            payload=response.content,
            function_error=response.headers.get("X-Amz-Function-Error"),
            executed_version=response.headers.get("X-Amz-Executed-Version"),
            request_id=response.headers.get("x-amzn-RequestId"),
        )


def parse_api_error(response: httpx.Response) -> Tuple[Optional[str], str]:
    """
    Extract (error_type, message) from an Invoke API error response.

    The error type comes from x-amzn-ErrorType ("Type:namespace" is trimmed)
    or the body's "__type"; the message from the body's "message"/"Message".
    """
    error_type = response.headers.get("x-amzn-ErrorType", "").split(":", 1)[0] or None
    detail = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        if not error_type and isinstance(data.get("__type"), str):
            error_type = data["__type"].rsplit("#", 1)[-1]
        message = data.get("message") or data.get("Message")
        if isinstance(message, str):
            detail = message
    if not detail:
        detail = response.text.strip() or f"HTTP {response.status_code}"
    detail = f"{detail} (status code: {response.status_code})"
    return error_type, detail
