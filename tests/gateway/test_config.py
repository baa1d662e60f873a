"""GatewayConfig 与客户端标识测试"""

import pytest
from starlette.requests import Request

from taskpilot.gateway.config import load_gateway_config
from taskpilot.gateway.deps import client_identifier

_ENV_VARS = [
    "TASKPILOT_RATE_LIMIT_MAX_REQUESTS",
    "TASKPILOT_RATE_LIMIT_WINDOW_MS",
    "TASKPILOT_CORS_ORIGINS",
    "TASKPILOT_FRONTEND_DIR",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def _request(headers: dict[str, str], client=("203.0.113.9", 5000)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
        "client": client,
    }
    return Request(scope)


class TestLoadGatewayConfig:
    def test_defaults(self):
        config = load_gateway_config()
        assert config.rate_limit_max_requests == 10
        assert config.rate_limit_window_ms == 60_000
        assert config.cors_origins == ["*"]
        assert config.frontend_dir is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TASKPILOT_RATE_LIMIT_MAX_REQUESTS", "5")
        monkeypatch.setenv("TASKPILOT_RATE_LIMIT_WINDOW_MS", "1000")
        monkeypatch.setenv("TASKPILOT_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("TASKPILOT_FRONTEND_DIR", "/srv/ui")

        config = load_gateway_config()
        assert config.rate_limit_max_requests == 5
        assert config.rate_limit_window_ms == 1000
        assert config.cors_origins == ["http://a.test", "http://b.test"]
        assert config.frontend_dir == "/srv/ui"

    def test_invalid_int_falls_back(self, monkeypatch):
        monkeypatch.setenv("TASKPILOT_RATE_LIMIT_MAX_REQUESTS", "ten")
        assert load_gateway_config().rate_limit_max_requests == 10

    @pytest.mark.parametrize(
        "env_var, value, attr, default",
        [
            ("TASKPILOT_RATE_LIMIT_WINDOW_MS", "0", "rate_limit_window_ms", 60_000),
            ("TASKPILOT_RATE_LIMIT_WINDOW_MS", "-500", "rate_limit_window_ms", 60_000),
            ("TASKPILOT_RATE_LIMIT_MAX_REQUESTS", "0", "rate_limit_max_requests", 10),
            ("TASKPILOT_RATE_LIMIT_MAX_REQUESTS", "-1", "rate_limit_max_requests", 10),
        ],
    )
    def test_non_positive_int_falls_back(
        self, monkeypatch, env_var, value, attr, default
    ):
        """小于 1 的数值视为无效配置，使用默认值"""
        monkeypatch.setenv(env_var, value)
        assert getattr(load_gateway_config(), attr) == default


class TestClientIdentifier:
    """限流客户端标识的取值优先级"""

    def test_cloudflare_header_first(self):
        request = _request(
            {"CF-Connecting-IP": "1.1.1.1", "X-Forwarded-For": "2.2.2.2"}
        )
        assert client_identifier(request) == "1.1.1.1"

    def test_first_forwarded_address(self):
        request = _request({"X-Forwarded-For": "2.2.2.2, 10.0.0.1"})
        assert client_identifier(request) == "2.2.2.2"

    def test_real_ip(self):
        assert client_identifier(_request({"X-Real-IP": "3.3.3.3"})) == "3.3.3.3"

    def test_peer_address(self):
        assert client_identifier(_request({})) == "203.0.113.9"

    def test_unknown(self):
        assert client_identifier(_request({}, client=None)) == "unknown"


class TestCreateAppWithInvalidEnv:
    def test_app_builds_with_zero_window(self, monkeypatch):
        """非法的限流配置不阻塞 app 创建"""
        from taskpilot.gateway.main import create_app

        monkeypatch.setenv("TASKPILOT_RATE_LIMIT_WINDOW_MS", "0")
        app = create_app()
        assert app.state.gateway_config.rate_limit_window_ms == 60_000
