"""Configuration management for the claim verification service."""

import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .errors import ConfigurationError, ErrorContext, ErrorType


@dataclass
class BedrockConfig:
    """Text and vision model service configuration."""
    endpoint_url: str
    model_id: str
    api_key: str
    region: str
    timeout: int
    max_tokens: int
    temperature: float


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str
    port: int
    cors_origins: list


@dataclass
class UploadConfig:
    """Upload limits."""
    max_file_size_mb: int

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class SessionConfig:
    """Claim session limits."""
    max_sessions: int = 1000
    ttl_seconds: int = 3600


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str
    format: str
    file: Optional[str]


DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s] %(message)s"


@dataclass
class Config:
    """Main configuration class."""
    bedrock: BedrockConfig
    server: ServerConfig
    uploads: UploadConfig
    logging: LoggingConfig
    sessions: SessionConfig = field(default_factory=SessionConfig)

    @classmethod
    def load(cls, config_path: str = "config.yaml") -> "Config":
        """
        Load configuration from file and environment variables.

        The YAML file is optional. Environment variables override file
        values:
        - BEDROCK_ENDPOINT_URL (required)
        - BEDROCK_MODEL_ID (required)
        - BEDROCK_API_KEY or AWS_BEARER_TOKEN_BEDROCK (required)
        - AWS_REGION
        - BEDROCK_TIMEOUT
        - HOST, PORT
        - MAX_FILE_SIZE_MB
        - MAX_SESSIONS, SESSION_TTL_SECONDS
        - LOG_LEVEL, LOG_FILE

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigurationError: If a required setting is missing or invalid
        """
        config_data: Dict[str, Any] = {}
        if config_path and os.path.exists(config_path):
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}

        bedrock_data = config_data.get("bedrock", {}) or {}
        server_data = config_data.get("server", {}) or {}
        upload_data = config_data.get("uploads", {}) or {}
        logging_data = config_data.get("logging", {}) or {}
        session_data = config_data.get("sessions", {}) or {}

        endpoint_url = os.getenv("BEDROCK_ENDPOINT_URL", bedrock_data.get("endpoint_url") or "")
        model_id = os.getenv("BEDROCK_MODEL_ID", bedrock_data.get("model_id") or "")
        # Credentials are only read from the environment, never from the file
        api_key = os.getenv("BEDROCK_API_KEY") or os.getenv("AWS_BEARER_TOKEN_BEDROCK") or ""

        missing = [
            name for name, value in (
                ("BEDROCK_ENDPOINT_URL", endpoint_url),
                ("BEDROCK_MODEL_ID", model_id),
                ("BEDROCK_API_KEY", api_key),
            )
            if not value.strip()
        ]
        if missing:
            raise ConfigurationError.build(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing
            )

        try:
            bedrock_config = BedrockConfig(
                endpoint_url=endpoint_url.strip(),
                model_id=model_id.strip(),
                api_key=api_key.strip(),
                region=os.getenv("AWS_REGION", bedrock_data.get("region", "us-east-1")),
                timeout=int(os.getenv("BEDROCK_TIMEOUT", bedrock_data.get("timeout", 60))),
                max_tokens=int(bedrock_data.get("max_tokens", 2048)),
                temperature=float(bedrock_data.get("temperature", 0.0))
            )

            server_config = ServerConfig(
                host=os.getenv("HOST", server_data.get("host", "0.0.0.0")),
                port=int(os.getenv("PORT", server_data.get("port", 3000))),
                cors_origins=list(server_data.get("cors_origins", ["*"]))
            )

            upload_config = UploadConfig(
                max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", upload_data.get("max_file_size_mb", 10)))
            )

            session_config = SessionConfig(
                max_sessions=int(os.getenv("MAX_SESSIONS", session_data.get("max_sessions", 1000))),
                ttl_seconds=int(os.getenv("SESSION_TTL_SECONDS", session_data.get("ttl_seconds", 3600)))
            )
            if session_config.max_sessions < 1 or session_config.ttl_seconds < 1:
                raise ValueError("session limits must be positive")
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                ErrorContext(
                    error_type=ErrorType.CONFIG_INVALID,
                    message=f"Invalid configuration value: {str(e)}",
                    original_exception=e
                )
            ) from e

        logging_config = LoggingConfig(
            level=os.getenv("LOG_LEVEL", logging_data.get("level", "INFO")),
            format=logging_data.get("format", DEFAULT_LOG_FORMAT),
            file=os.getenv("LOG_FILE", logging_data.get("file"))
        )

        return cls(
            bedrock=bedrock_config,
            server=server_config,
            uploads=upload_config,
            logging=logging_config,
            sessions=session_config,
        )
