import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Type

from pydantic import ValidationError
from starlette.requests import ClientDisconnect, Request

from lambda_proxy.config import ProxyConfig
from lambda_proxy.core.exceptions import (
    ConfigurationError,
    RequestEncodingError,
    ResponseDecodingError,
)
from lambda_proxy.models.alb import (
    ALBIdentity,
    ALBRequestContext,
    ALBTargetGroupRequest,
    ALBTargetGroupResponse,
    ElbContext,
)
from lambda_proxy.models.result import ProxyResponse

logger = logging.getLogger("lambda_proxy.payload_builder")

# Recomputed by the server from the decoded body.
_DROPPED_RESPONSE_HEADERS = frozenset({"content-length"})


def canonical_header_key(name: str) -> str:
    """
    Return the canonical MIME form of a header name ("x-forwarded-for" ->
    "X-Forwarded-For"). Names with characters outside a token are returned
    unchanged.
    """
    if not name or any(c == " " or not c.isprintable() or ord(c) > 127 for c in name):
        return name
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error["loc"]) or "payload"
        parts.append(f"{loc}: {error['msg']}")
    return "; ".join(parts)


class PayloadBuilder(ABC):
    """Translates between HTTP requests/responses and a Lambda integration's events."""

    @abstractmethod
    async def build_request(self, request: Request) -> bytes:
        """
        Read the request and serialize it into an invocation event.

        Raises:
            RequestEncodingError: the request body could not be read
        """
        pass

    @abstractmethod
    def build_response(self, payload: bytes) -> ProxyResponse:
        """
        Parse an invocation result into status, body, and header multi-map.

        Raises:
            ResponseDecodingError: the payload is not a well-formed result
        """
        pass

    @classmethod
    @abstractmethod
    def from_config(cls, config: ProxyConfig) -> "PayloadBuilder":
        pass


class ALBPayloadBuilder(PayloadBuilder):
    """Application Load Balancer target group compatible payload builder."""

    def __init__(self, multi_value: bool = False, target_group_arn: str = ""):
        self.multi_value = multi_value
        self.target_group_arn = target_group_arn

    @classmethod
    def from_config(cls, config: ProxyConfig) -> "ALBPayloadBuilder":
        return cls(multi_value=config.ALB_MULTI_VALUE, target_group_arn=config.TARGET_GROUP_ARN)

    async def build_request(self, request: Request) -> bytes:
        try:
            body = await request.body()
        except (ClientDisconnect, RuntimeError) as e:
            raise RequestEncodingError(f"Failed to read request body: {e!r}") from e

        # Binary bodies travel base64-encoded.
        is_base64 = False
        try:
            body_content = body.decode("utf-8")
        except UnicodeDecodeError:
            body_content = base64.b64encode(body).decode("ascii")
            is_base64 = True

        multi_headers: Dict[str, List[str]] = {}
        for name, value in request.headers.items():
            multi_headers.setdefault(canonical_header_key(name), []).append(value)

        multi_query: Dict[str, List[str]] = {}
        for name, value in request.query_params.multi_items():
            multi_query.setdefault(name, []).append(value)

        event = ALBTargetGroupRequest(
            httpMethod=request.method,
            path=request.url.path,
            requestContext=ALBRequestContext(
                elb=ElbContext(targetGroupArn=self.target_group_arn),
                identity=ALBIdentity(sourceIp=request.client.host if request.client else ""),
            ),
            isBase64Encoded=is_base64,
            body=body_content,
        )
        if self.multi_value:
            event.multiValueHeaders = multi_headers
            event.multiValueQueryStringParameters = multi_query
        else:
            # Repeated names keep their last value.
            event.headers = {name: values[-1] for name, values in multi_headers.items()}
            event.queryStringParameters = {name: values[-1] for name, values in multi_query.items()}

        return event.model_dump_json(exclude_none=True).encode("utf-8")

    def build_response(self, payload: bytes) -> ProxyResponse:
        try:
            result = ALBTargetGroupResponse.model_validate_json(payload)
        except ValidationError as e:
            raise ResponseDecodingError(format_validation_error(e)) from e

        body = b""
        if result.body:
            try:
                if result.isBase64Encoded:
                    body = base64.b64decode(result.body, validate=True)
                else:
                    body = result.body.encode("utf-8")
            except (binascii.Error, UnicodeEncodeError) as e:
                raise ResponseDecodingError(f"Invalid response body: {e}") from e

        headers: Dict[str, List[str]] = {}
        seen = set()
        for name, values in (result.multiValueHeaders or {}).items():
            headers[name] = list(values)
            seen.add(name.lower())
        for name, value in (result.headers or {}).items():
            if name.lower() in seen:
                continue
            headers[name] = [value] if isinstance(value, str) else list(value)
            seen.add(name.lower())

        for name in list(headers):
            if name.lower() in _DROPPED_RESPONSE_HEADERS:
                del headers[name]

        return ProxyResponse(status_code=result.statusCode, body=body, headers=headers)


PAYLOAD_BUILDERS: Dict[str, Type[PayloadBuilder]] = {
    "alb": ALBPayloadBuilder,
}


def get_payload_builder(config: ProxyConfig) -> PayloadBuilder:
    """
    Resolve the configured integration type to a payload builder.

    Raises:
        ConfigurationError: the integration type is not supported
    """
    builder_cls = PAYLOAD_BUILDERS.get(config.API_TYPE)
    if builder_cls is None:
        raise ConfigurationError(f"Unknown gateway type: {config.API_TYPE}")
    logger.info(
        "Using %s payload builder (multi-value: %s)", config.API_TYPE, config.ALB_MULTI_VALUE
    )
    return builder_cls.from_config(config)
