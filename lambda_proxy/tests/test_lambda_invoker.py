import httpx
import pytest
import respx
from botocore.credentials import Credentials

from lambda_proxy.core.aws_auth import SigV4Signer
from lambda_proxy.core.exceptions import LambdaInvokeError
from lambda_proxy.services.lambda_invoker import LambdaInvoker
from lambda_proxy.tests.conftest import INVOKE_URL, TEST_ENDPOINT, TEST_FUNCTION


def unsigned() -> SigV4Signer:
    return SigV4Signer(None, "us-east-1")


@pytest.mark.asyncio
async def test_invoke_returns_payload():
    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, unsigned(), endpoint=TEST_ENDPOINT)

        with respx.mock:
            route = respx.post(INVOKE_URL).mock(
                return_value=httpx.Response(
                    200,
                    content=b'{"statusCode": 200}',
                    headers={"X-Amz-Executed-Version": "$LATEST", "x-amzn-RequestId": "req-1"},
                )
            )
            result = await invoker.invoke_function(TEST_FUNCTION, b'{"path": "/"}')

    assert route.called
    sent = route.calls.last.request
    assert sent.content == b'{"path": "/"}'
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers["X-Amz-Invocation-Type"] == "RequestResponse"
    assert "Authorization" not in sent.headers

    assert result.status_code == 200
    assert result.payload == b'{"statusCode": 200}'
    assert result.is_function_error is False
    assert result.executed_version == "$LATEST"
    assert result.request_id == "req-1"


@pytest.mark.asyncio
async def test_invoke_reports_function_error():
    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, unsigned(), endpoint=TEST_ENDPOINT)

        with respx.mock:
            respx.post(INVOKE_URL).mock(
                return_value=httpx.Response(
                    200,
                    json={"errorMessage": "boom", "errorType": "Exception"},
                    headers={"X-Amz-Function-Error": "Unhandled"},
                )
            )
            result = await invoker.invoke_function(TEST_FUNCTION, b"{}")

    assert result.is_function_error is True
    assert result.function_error == "Unhandled"


@pytest.mark.asyncio
async def test_invoke_connection_failure():
    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, unsigned(), endpoint=TEST_ENDPOINT)

        with respx.mock:
            respx.post(INVOKE_URL).mock(side_effect=httpx.ConnectError("Connection refused"))
            with pytest.raises(LambdaInvokeError) as excinfo:
                await invoker.invoke_function(TEST_FUNCTION, b"{}")

    assert "Connection refused" in str(excinfo.value)
    assert excinfo.value.function_name == TEST_FUNCTION


@pytest.mark.asyncio
async def test_invoke_api_error_status():
    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, unsigned(), endpoint=TEST_ENDPOINT)

        with respx.mock:
            respx.post(INVOKE_URL).mock(
                return_value=httpx.Response(
                    429,
                    json={"Type": "User", "message": "Rate Exceeded."},
                    headers={"x-amzn-ErrorType": "TooManyRequestsException:http://internal"},
                )
            )
            with pytest.raises(LambdaInvokeError) as excinfo:
                await invoker.invoke_function(TEST_FUNCTION, b"{}")

    assert excinfo.value.status_code == 429
    assert excinfo.value.error_type == "TooManyRequestsException"
    assert str(excinfo.value) == "TooManyRequestsException: Rate Exceeded. (status code: 429)"


@pytest.mark.asyncio
async def test_invoke_api_error_without_json_body():
    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, unsigned(), endpoint=TEST_ENDPOINT)

        with respx.mock:
            respx.post(INVOKE_URL).mock(return_value=httpx.Response(503, text=""))
            with pytest.raises(LambdaInvokeError) as excinfo:
                await invoker.invoke_function(TEST_FUNCTION, b"{}")

    assert str(excinfo.value) == "HTTP 503 (status code: 503)"


@pytest.mark.asyncio
async def test_invoke_signs_request_with_credentials():
    signer = SigV4Signer(Credentials("AKIDEXAMPLE", "secret", "session-token"), "eu-west-1")

    async with httpx.AsyncClient() as client:
        invoker = LambdaInvoker(client, signer, endpoint=TEST_ENDPOINT)

        with respx.mock:
            route = respx.post(INVOKE_URL).mock(
                return_value=httpx.Response(200, json={"statusCode": 200})
            )
            await invoker.invoke_function(TEST_FUNCTION, b"{}")

    sent = route.calls.last.request
    assert sent.headers["Authorization"].startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
    assert "/eu-west-1/lambda/aws4_request" in sent.headers["Authorization"]
    assert sent.headers["X-Amz-Security-Token"] == "session-token"
    assert "X-Amz-Date" in sent.headers


def test_default_endpoint_uses_region():
    invoker = LambdaInvoker(httpx.AsyncClient(), SigV4Signer(None, "ap-northeast-1"))

    assert invoker.endpoint == "https://lambda.ap-northeast-1.amazonaws.com"


def test_invocation_url_quotes_arn():
    invoker = LambdaInvoker(httpx.AsyncClient(), unsigned(), endpoint=TEST_ENDPOINT + "/")
    arn = "arn:aws:lambda:us-east-1:123456789012:function:my-func"

    url = invoker.invocation_url(arn)

    assert url == (
        f"{TEST_ENDPOINT}/2015-03-31/functions/"
        "arn%3Aaws%3Alambda%3Aus-east-1%3A123456789012%3Afunction%3Amy-func/invocations"
    )
