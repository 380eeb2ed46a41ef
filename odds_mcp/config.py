from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

from odds_mcp.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # The Odds API
    odds_api_key: str = ""
    odds_api_base_url: str = "https://api.the-odds-api.com/v4"
    odds_api_timeout_seconds: float = 30.0

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"
    shutdown_timeout_seconds: int = 10  # Grace period for open streams on SIGINT/SIGTERM

    # MCP server identity
    server_name: str = "odds-api-mcp-server"
    server_version: str = "1.0.0"

    # Sessions
    request_timeout_seconds: float = 30.0
    session_idle_timeout_seconds: int = 1800  # 30min
    session_reap_interval_seconds: int = 60
    session_close_timeout_seconds: float = 5.0
    mcp_json_response: bool = False  # Plain JSON instead of SSE for POST responses

    # Player props
    props_bookmaker: str = "draftkings"
    props_bookmaker_title: str = "DraftKings"
    props_region: str = "us"
    props_fetch_concurrency: int = 1  # 1 = one event at a time

    # Reports
    display_timezone: str = "UTC"

    # CORS
    cors_origins: str = "*"  # Comma-separated origins or "*" for all

    # API Key authentication
    api_key: str = ""  # If set, requires X-API-Key header
    api_key_enabled: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        if self.cors_origins == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def display_tz(self) -> tzinfo:
        if self.display_timezone.upper() == "UTC":
            return timezone.utc
        return ZoneInfo(self.display_timezone)

    def require_odds_api_key(self) -> str:
        """Return the provider key, failing fast when it is not configured."""
        if not self.odds_api_key.strip():
            raise ConfigurationError(
                "ODDS_API_KEY is not set; the server cannot reach The Odds API",
                setting="odds_api_key",
            )
        return self.odds_api_key


settings = Settings()
