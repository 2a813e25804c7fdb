"""Configuration for the underhood gateway server."""

import os

from dotenv import load_dotenv

load_dotenv()


class ServerConfig:
    """Server configuration."""

    def __init__(self) -> None:
        """Initialize server configuration from environment variables."""
        self.host = os.getenv("UNDERHOOD_HOST", "0.0.0.0")
        self.port = int(os.getenv("UNDERHOOD_PORT", "6080"))

        self.search_backend = os.getenv("SEARCH_BACKEND", "zoekt").lower()
        self.zoekt_api_url = self._get_required_env("ZOEKT_API_URL")

        # Limits applied to every backend call
        self.max_wall_time = float(os.getenv("SEARCH_MAX_WALL_TIME", "10"))
        self.xref_max_files = int(os.getenv("XREF_MAX_FILES", "50"))

        # Logging
        self.log_dir = os.getenv("LOG_DIR", "")
        self.log_refresh_hours = int(os.getenv("LOG_REFRESH_HOURS", "24"))

        # TLS is enabled when either is set; uvicorn complains if one is missing.
        self.ssl_cert = os.getenv("SSL_CERT", "")
        self.ssl_key = os.getenv("SSL_KEY", "")

        # OpenTelemetry configuration (optional)
        self.otel_enabled = os.getenv("OTEL_ENABLED", "false").lower() == "true"
        if self.otel_enabled:
            self.otel_endpoint = self._get_required_env("OTEL_EXPORTER_OTLP_ENDPOINT")
        else:
            self.otel_endpoint = ""

        if self.max_wall_time <= 0:
            raise ValueError("SEARCH_MAX_WALL_TIME must be positive")
        if self.xref_max_files <= 0:
            raise ValueError("XREF_MAX_FILES must be positive")

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value
