"""Tests for configuration loading."""

import pytest

from claimcheck.utils.config import Config
from claimcheck.utils.errors import ConfigurationError, ErrorType

ENV_VARS = (
    "BEDROCK_ENDPOINT_URL",
    "BEDROCK_MODEL_ID",
    "BEDROCK_API_KEY",
    "AWS_BEARER_TOKEN_BEDROCK",
    "AWS_REGION",
    "BEDROCK_TIMEOUT",
    "HOST",
    "PORT",
    "MAX_FILE_SIZE_MB",
    "MAX_SESSIONS",
    "SESSION_TTL_SECONDS",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def required_env(monkeypatch):
    monkeypatch.setenv("BEDROCK_ENDPOINT_URL", "https://bedrock-runtime.us-east-1.amazonaws.com")
    monkeypatch.setenv("BEDROCK_MODEL_ID", "anthropic.claude-3-haiku")
    monkeypatch.setenv("BEDROCK_API_KEY", "secret")


def test_missing_settings_fail_fast(tmp_path):
    with pytest.raises(ConfigurationError) as excinfo:
        Config.load(str(tmp_path / "absent.yaml"))

    assert excinfo.value.context.error_type is ErrorType.CONFIG_MISSING
    assert excinfo.value.context.details["missing"] == [
        "BEDROCK_ENDPOINT_URL", "BEDROCK_MODEL_ID", "BEDROCK_API_KEY"
    ]


def test_api_key_is_required(monkeypatch, tmp_path):
    monkeypatch.setenv("BEDROCK_ENDPOINT_URL", "https://bedrock.test")
    monkeypatch.setenv("BEDROCK_MODEL_ID", "model")

    with pytest.raises(ConfigurationError) as excinfo:
        Config.load(str(tmp_path / "absent.yaml"))
    assert excinfo.value.context.details["missing"] == ["BEDROCK_API_KEY"]


def test_defaults_from_environment(required_env, tmp_path):
    config = Config.load(str(tmp_path / "absent.yaml"))

    assert config.bedrock.model_id == "anthropic.claude-3-haiku"
    assert config.bedrock.api_key == "secret"
    assert config.bedrock.region == "us-east-1"
    assert config.bedrock.timeout == 60
    assert config.server.port == 3000
    assert config.uploads.max_file_size_bytes == 10 * 1024 * 1024
    assert config.logging.level == "INFO"


def test_bearer_token_variable_is_accepted(monkeypatch, tmp_path):
    monkeypatch.setenv("BEDROCK_ENDPOINT_URL", "https://bedrock.test")
    monkeypatch.setenv("BEDROCK_MODEL_ID", "model")
    monkeypatch.setenv("AWS_BEARER_TOKEN_BEDROCK", "token")

    assert Config.load(str(tmp_path / "absent.yaml")).bedrock.api_key == "token"


def test_yaml_values_with_env_override(required_env, monkeypatch, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "bedrock:\n"
        "  model_id: from-file\n"
        "  timeout: 30\n"
        "  max_tokens: 1024\n"
        "server:\n"
        "  port: 8080\n"
        "  cors_origins: [\"http://localhost:5173\"]\n"
        "uploads:\n"
        "  max_file_size_mb: 5\n"
    )
    monkeypatch.setenv("PORT", "9000")

    config = Config.load(str(config_file))

    assert config.bedrock.model_id == "anthropic.claude-3-haiku"
    assert config.bedrock.timeout == 30
    assert config.bedrock.max_tokens == 1024
    assert config.server.port == 9000
    assert config.server.cors_origins == ["http://localhost:5173"]
    assert config.uploads.max_file_size_mb == 5


def test_invalid_number_is_reported(required_env, monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "eighty")

    with pytest.raises(ConfigurationError) as excinfo:
        Config.load(str(tmp_path / "absent.yaml"))
    assert excinfo.value.context.error_type is ErrorType.CONFIG_INVALID


def test_session_limits(required_env, monkeypatch, tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("sessions:\n  max_sessions: 50\n  ttl_seconds: 600\n")
    monkeypatch.setenv("MAX_SESSIONS", "25")

    config = Config.load(str(config_file))

    assert config.sessions.max_sessions == 25
    assert config.sessions.ttl_seconds == 600


def test_session_cap_must_be_positive(required_env, monkeypatch, tmp_path):
    monkeypatch.setenv("MAX_SESSIONS", "0")

    with pytest.raises(ConfigurationError) as excinfo:
        Config.load(str(tmp_path / "absent.yaml"))
    assert excinfo.value.context.error_type is ErrorType.CONFIG_INVALID
