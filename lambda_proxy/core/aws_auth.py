"""
AWS credentials and SigV4 signing for Invoke API calls.

Credentials and region come from botocore's default chains (environment,
shared config/credentials files, container and instance metadata).
"""

import logging
from typing import Dict, Optional

import botocore.session
from botocore.auth import SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

logger = logging.getLogger("lambda_proxy.aws_auth")

DEFAULT_REGION = "us-east-1"


class SigV4Signer:
    """Signs Lambda Invoke API requests for a fixed region."""

    service_name = "lambda"

    def __init__(self, credentials: Optional[Credentials], region: str):
        self.credentials = credentials
        self.region = region

    @classmethod
    def from_default_chain(cls, region: str = "") -> "SigV4Signer":
        session = botocore.session.get_session()
        region = region or session.get_config_variable("region") or DEFAULT_REGION
        credentials = session.get_credentials()
        if credentials is None:
            logger.warning("No AWS credentials found; Invoke API requests will not be signed")
        return cls(credentials, region)

    @property
    def enabled(self) -> bool:
        return self.credentials is not None

    def sign(self, method: str, url: str, body: bytes, headers: Dict[str, str]) -> Dict[str, str]:
        """
        Return headers extended with the SigV4 Authorization, X-Amz-Date and,
        for temporary credentials, X-Amz-Security-Token headers.
        """
        if self.credentials is None:
            return dict(headers)

        request = AWSRequest(method=method, url=url, data=body, headers=dict(headers))
        SigV4Auth(self.credentials.get_frozen_credentials(), self.service_name, self.region).add_auth(
            request
        )
        return dict(request.headers.items())
