"""
Proxy configuration definition.

Loads configuration from environment variables (and an optional .env file)
through pydantic-settings. Command-line flags are applied on top by
lambda_proxy.main.
"""

from typing import Any, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TARGET_GROUP_ARN = (
    "arn:aws:elasticloadbalancing:us-east-1:123456789012:targetgroup/lambda-proxy/0123456789abcdef"
)


class ProxyConfig(BaseSettings):
    """
    Configuration for the proxy process. Treated as immutable once loaded.
    """

    # Lambda target
    FUNCTION: str = Field(default="function", description="Lambda function name")
    ENDPOINT: str = Field(default="", description="Lambda API endpoint override")
    AWS_REGION: str = Field(default="", description="AWS region for the Lambda API")

    # Listener
    BIND: str = Field(default="", description="HTTP listen address")
    PORT: int = Field(default=8080, ge=1, le=65535, description="HTTP listen port")

    # Integration
    API_TYPE: str = Field(default="alb", description='HTTP gateway type ("alb" for ALB)')
    ALB_MULTI_VALUE: bool = Field(
        default=False,
        description="Enable multi-value headers. Effective only with API_TYPE=alb",
    )
    TARGET_GROUP_ARN: str = Field(
        default=DEFAULT_TARGET_GROUP_ARN, description="Target group ARN reported in events"
    )

    # Flow control
    LAMBDA_INVOKE_TIMEOUT: Optional[float] = Field(
        default=None, gt=0, description="Lambda invoke timeout (seconds), unset for none"
    )
    QUEUE_TIMEOUT_SECONDS: Optional[float] = Field(
        default=None, gt=0, description="Concurrency gate wait timeout, unset for none"
    )
    VERIFY_SSL: bool = Field(default=True, description="Whether to verify SSL certificates")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: str = Field(default="", description="YAML logging config path")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )

    @property
    def listen_host(self) -> str:
        # An empty bind address listens on every interface.
        return self.BIND or "0.0.0.0"

    @property
    def listen_address(self) -> str:
        return f"{self.BIND}:{self.PORT}"


def load_config(**overrides: Any) -> ProxyConfig:
    """
    Load configuration from the environment, then apply explicit overrides.

    Overrides whose value is None are ignored so unset CLI flags do not mask
    environment values.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    return ProxyConfig(**values)
