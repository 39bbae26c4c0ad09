# lambda_proxy/models/alb.py

"""
Pydantic models for the AWS Application Load Balancer Lambda target event.

Reference: https://docs.aws.amazon.com/elasticloadbalancing/latest/application/lambda-functions.html

Single-valued and multi-valued header/query fields are both optional; the
builder fills exactly one of each pair, and model_dump(exclude_none=True)
leaves the other out of the wire form.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ElbContext(BaseModel):
    """requestContext.elb object."""

    targetGroupArn: str


class ALBIdentity(BaseModel):
    """Caller identity."""

    sourceIp: str


class ALBRequestContext(BaseModel):
    """ALB Request Context object."""

    elb: ElbContext
    identity: ALBIdentity


class ALBTargetGroupRequest(BaseModel):
    """Event received by a Lambda function registered as an ALB target."""

    httpMethod: str
    path: str
    queryStringParameters: Optional[Dict[str, str]] = None
    multiValueQueryStringParameters: Optional[Dict[str, List[str]]] = None
    headers: Optional[Dict[str, str]] = None
    multiValueHeaders: Optional[Dict[str, List[str]]] = None
    requestContext: ALBRequestContext
    isBase64Encoded: bool = False
    body: str = ""


class ALBTargetGroupResponse(BaseModel):
    """
    Response envelope returned by the function.

    Validated strictly: a function returning "200" as statusCode or a list
    as headers is a malformed response, not something to coerce.
    """

    statusCode: int = Field(ge=100, le=599)
    statusDescription: Optional[str] = None
    headers: Optional[Dict[str, Union[str, List[str]]]] = None
    multiValueHeaders: Optional[Dict[str, List[str]]] = None
    body: Optional[str] = None
    isBase64Encoded: bool = False

    model_config = ConfigDict(strict=True)
