"""
Configuration management for the CreatorDB proxy
"""

import os
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings
import yaml
from dotenv import load_dotenv

from creatordb_proxy.errors import ConfigurationError

# Load .env file at module import time
load_dotenv()

DEFAULT_BASE_URL = "https://apiv3.creatordb.app"
DEFAULT_API_KEY_HEADER = "api-key"


class UpstreamConfig(BaseModel):
    """Immutable connection details for the upstream API.

    Built once at startup and handed to the executor. Nothing mutates it
    afterwards, so concurrent requests can share it freely.
    """
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    api_key: str
    api_key_header: str = DEFAULT_API_KEY_HEADER


class HttpConfig(BaseModel):
    """REST listener configuration"""
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class ProxySettings(BaseSettings):
    """
    Proxy settings from environment variables.

    - CREATORDB_API_KEY: Required, sent as the api-key header upstream
    - CREATORDB_BASE_URL: Optional, defaults to the public API
    - PROXY_HOST, PROXY_PORT: Optional, REST listener address
    """
    creatordb_api_key: str = Field(alias="CREATORDB_API_KEY")
    creatordb_base_url: Optional[str] = Field(alias="CREATORDB_BASE_URL", default=None)

    proxy_host: Optional[str] = Field(alias="PROXY_HOST", default=None)
    proxy_port: Optional[int] = Field(alias="PROXY_PORT", default=None)

    log_level: str = Field(alias="LOG_LEVEL", default="INFO")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class ProxyConfig(BaseModel):
    """Complete proxy configuration"""
    name: str = "creatordb-mcp-server"
    version: str = "1.0.0"
    description: str = "HTTP and MCP wrapper for CreatorDB - Influencer Marketing Data across Instagram, YouTube, and TikTok"

    upstream: UpstreamConfig
    http: HttpConfig = Field(default_factory=HttpConfig)
    log_level: str = "INFO"

    @classmethod
    def from_settings(
        cls,
        env_settings: ProxySettings,
        yaml_config: Optional[dict] = None
    ) -> "ProxyConfig":
        """
        Merge YAML values with environment settings (environment wins)

        Raises:
            ConfigurationError: If a section is not a mapping or a value is invalid
        """
        yaml_config = yaml_config or {}

        sections = {}
        for section in ("server", "upstream", "http"):
            raw = yaml_config.get(section) or {}
            if not isinstance(raw, dict):
                raise ConfigurationError(f"Config section '{section}' must be a mapping")
            sections[section] = raw
        server_raw = sections["server"]
        upstream_raw = sections["upstream"]
        http_raw = dict(sections["http"])

        if env_settings.proxy_host:
            http_raw["host"] = env_settings.proxy_host
        if env_settings.proxy_port is not None:
            http_raw["port"] = env_settings.proxy_port

        base_url = (
            env_settings.creatordb_base_url
            or upstream_raw.get("base_url")
            or DEFAULT_BASE_URL
        )
        extra = {k: server_raw[k] for k in ("name", "version", "description") if k in server_raw}

        try:
            upstream = UpstreamConfig(
                base_url=str(base_url).rstrip("/"),
                api_key=env_settings.creatordb_api_key,
                api_key_header=upstream_raw.get("api_key_header", DEFAULT_API_KEY_HEADER),
            )
            return cls(
                upstream=upstream,
                http=HttpConfig(**http_raw),
                log_level=env_settings.log_level,
                **extra
            )
        except ValidationError as e:
            fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
            raise ConfigurationError(
                f"Invalid {e.title} configuration: {', '.join(fields)}"
            ) from e

    @classmethod
    def from_yaml(cls, config_path: str, env_settings: Optional[ProxySettings] = None) -> "ProxyConfig":
        """
        Load configuration from YAML file and environment

        Raises:
            ConfigurationError: If the file is not valid YAML or holds invalid values
        """
        with open(config_path, "r") as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Could not parse {config_path}: {e}") from e

        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a YAML mapping")

        if env_settings is None:
            env_settings = load_settings()

        return cls.from_settings(env_settings, yaml_config)


def load_settings() -> ProxySettings:
    """
    Read settings from the environment.

    Raises:
        ConfigurationError: If CREATORDB_API_KEY is missing or empty
    """
    try:
        settings = ProxySettings()
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        if "CREATORDB_API_KEY" in fields:
            raise ConfigurationError("CREATORDB_API_KEY environment variable is required") from e
        raise ConfigurationError(f"Invalid proxy settings: {', '.join(fields)}") from e

    if not settings.creatordb_api_key.strip():
        raise ConfigurationError("CREATORDB_API_KEY environment variable is required")
    return settings


def load_config() -> ProxyConfig:
    """Load configuration from environment and YAML"""
    config_path = os.getenv("CONFIG_PATH", "config/config.yaml")

    env_settings = load_settings()

    if os.path.exists(config_path):
        return ProxyConfig.from_yaml(config_path, env_settings)
    else:
        # Minimal config from env only
        return ProxyConfig.from_settings(env_settings)
