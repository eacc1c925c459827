"""Configuration management using Pydantic Settings."""

from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden using environment variables (prefixed with
    ``RENTDESK_``) or a .env file.
    """

    # Backend API Configuration
    api_url: Optional[str] = Field(
        default=None,
        description="Primary backend base URL. Probed before the built-in candidates"
    )
    api_servers: List[str] = Field(
        default=[
            "http://87.242.103.146:3001/api",
            "http://localhost:3001/api",
        ],
        description="Candidate backend base URLs in priority order"
    )
    health_path: str = Field(
        default="/health",
        description="Path probed to decide whether a backend is live"
    )
    health_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for a liveness probe"
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for ordinary resource calls"
    )
    failover_policy: Literal["any_network_error", "strict"] = Field(
        default="any_network_error",
        description="Which connection errors trigger a failover probe and retry"
    )

    # Session Configuration
    token_file: str = Field(
        default=".rentdesk/session.json",
        description="File that persists the session token between runs"
    )
    login_path: str = Field(
        default="/login",
        description="View the client is sent to when the session ends"
    )

    # Reverse Proxy Configuration
    proxy_backend_url: str = Field(
        default="http://87.242.103.146:3001/api",
        description="Backend base URL the proxy forwards to"
    )
    proxy_mount_prefix: str = Field(
        default="/.netlify/functions/api",
        description="Path prefix stripped from proxied requests"
    )
    proxy_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for forwarded requests"
    )

    # Application Settings
    app_name: str = Field(
        default="RentDesk API Proxy",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode flag"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Path to log file. Logs go to stderr only when unset"
    )

    class Config:
        """Pydantic config."""
        env_prefix = "RENTDESK_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

        # Allow extra fields from environment
        extra = "ignore"

        # Example values for documentation
        json_schema_extra = {
            "example": {
                "api_url": "https://rent.example.com/.netlify/functions/api",
                "failover_policy": "any_network_error",
                "token_file": ".rentdesk/session.json",
                "debug": False,
                "log_level": "INFO"
            }
        }

    @property
    def candidate_servers(self) -> List[str]:
        """Backend candidates in probe order, override first and deduplicated."""
        candidates = []
        for url in ([self.api_url] if self.api_url else []) + list(self.api_servers):
            url = url.rstrip("/")
            if url and url not in candidates:
                candidates.append(url)
        return candidates


# Create a singleton instance
settings = Settings()
