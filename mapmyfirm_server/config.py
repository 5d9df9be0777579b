"""
MapMyFirm Server - Configuration

Pydantic Settings for all configuration via environment variables.
"""

import json
import logging
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional, Literal


class WordPressSettings(BaseSettings):
    """WordPress REST API configuration."""
    site_url: str = Field("", alias="WORDPRESS_SITE_URL")
    per_page: int = Field(100, alias="WORDPRESS_PER_PAGE")
    timeout_seconds: float = Field(30.0, alias="WORDPRESS_TIMEOUT_SECONDS")
    content_types: List[str] = Field(
        default_factory=lambda: ["pages"], alias="WORDPRESS_CONTENT_TYPES"
    )

    model_config = {"env_prefix": "", "extra": "ignore"}


class MatchingSettings(BaseSettings):
    """Location-to-hub fuzzy matching configuration."""
    threshold: float = Field(0.4, alias="MATCH_THRESHOLD")
    title_weight: float = Field(0.5, alias="MATCH_TITLE_WEIGHT")
    slug_weight: float = Field(0.3, alias="MATCH_SLUG_WEIGHT")
    url_weight: float = Field(0.2, alias="MATCH_URL_WEIGHT")
    hub_type_name: Optional[str] = Field(None, alias="HUB_TYPE_NAME")
    hub_tag: str = Field("Location Hub", alias="HUB_TAG")

    model_config = {"env_prefix": "", "extra": "ignore"}


class AutosaveSettings(BaseSettings):
    """Project autosave configuration."""
    enabled: bool = Field(True, alias="AUTOSAVE_ENABLED")
    debounce_seconds: float = Field(1.0, alias="AUTOSAVE_DEBOUNCE_SECONDS")

    model_config = {"env_prefix": "", "extra": "ignore"}


class CacheSettings(BaseSettings):
    """Caching configuration."""
    enabled: bool = Field(True, alias="CACHE_ENABLED")
    ttl_types: int = Field(900, alias="CACHE_TTL_TYPES_SECONDS")
    max_sites: int = Field(64, alias="CACHE_MAX_SITES")

    model_config = {"env_prefix": "", "extra": "ignore"}


class MCPSettings(BaseSettings):
    """MCP server configuration."""
    transport: Literal["sse", "stdio"] = Field("sse", alias="MCP_TRANSPORT")
    port: int = Field(8080, alias="MCP_PORT")
    host: str = Field("0.0.0.0", alias="MCP_HOST")

    model_config = {"env_prefix": "", "extra": "ignore"}


class LogSettings(BaseSettings):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO", alias="LOG_LEVEL"
    )
    format: Literal["json", "text"] = Field("json", alias="LOG_FORMAT")

    model_config = {"env_prefix": "", "extra": "ignore"}


class Settings(BaseSettings):
    """Main settings aggregating all configuration."""
    wordpress: WordPressSettings = Field(default_factory=WordPressSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    autosave: AutosaveSettings = Field(default_factory=AutosaveSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    mcp: MCPSettings = Field(default_factory=MCPSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = {"env_prefix": "", "extra": "ignore"}


def get_settings() -> Settings:
    """Load settings from environment variables."""
    from dotenv import load_dotenv
    load_dotenv()
    return Settings()


class _JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Configure the root logger from LogSettings."""
    settings = settings or get_settings()

    handler = logging.StreamHandler()
    if settings.log.format == "json":
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log.level)
