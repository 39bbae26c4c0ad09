import pytest
from pydantic import ValidationError

from lambda_proxy.config import DEFAULT_TARGET_GROUP_ARN, ProxyConfig, load_config


def test_config_defaults(monkeypatch):
    for name in (
        "FUNCTION",
        "ENDPOINT",
        "PORT",
        "API_TYPE",
        "ALB_MULTI_VALUE",
        "QUEUE_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = ProxyConfig()

    assert config.FUNCTION == "function"
    assert config.ENDPOINT == ""
    assert config.PORT == 8080
    assert config.API_TYPE == "alb"
    assert config.ALB_MULTI_VALUE is False
    assert config.TARGET_GROUP_ARN == DEFAULT_TARGET_GROUP_ARN
    assert config.QUEUE_TIMEOUT_SECONDS is None
    assert config.LAMBDA_INVOKE_TIMEOUT is None


def test_config_from_environment(monkeypatch):
    monkeypatch.setenv("FUNCTION", "orders")
    monkeypatch.setenv("ENDPOINT", "http://localhost:9001")
    monkeypatch.setenv("ALB_MULTI_VALUE", "1")
    monkeypatch.setenv("QUEUE_TIMEOUT_SECONDS", "2.5")

    config = ProxyConfig()

    assert config.FUNCTION == "orders"
    assert config.ENDPOINT == "http://localhost:9001"
    assert config.ALB_MULTI_VALUE is True
    assert config.QUEUE_TIMEOUT_SECONDS == 2.5


def test_load_config_ignores_unset_overrides(monkeypatch):
    monkeypatch.setenv("FUNCTION", "from-env")

    config = load_config(FUNCTION=None, PORT=9090)

    assert config.FUNCTION == "from-env"
    assert config.PORT == 9090


def test_config_is_immutable():
    config = ProxyConfig()

    with pytest.raises(ValidationError):
        config.PORT = 1


def test_config_rejects_invalid_port():
    with pytest.raises(ValidationError):
        ProxyConfig(PORT=70000)
