"""
Coolify MCP Server - Configuration
==================================
Loads from ~/.config/coolify-mcp/config.yaml with env var overrides.
The resulting Settings value is built once at startup and never mutated.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import httpx
import yaml
from dotenv import load_dotenv

from .errors import AuthConfigError, ConfigError
from .validators import validate_token, validate_token_path

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PATH = "/root/.coolify-token"
DEFAULT_PORT = 8000
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "coolify-mcp" / "config.yaml"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, including the loaded credential."""

    base_url: str
    token: str = field(repr=False)
    timeout: float = DEFAULT_TIMEOUT
    production: bool = False
    log_level: str = "WARNING"

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/api/v1"


@dataclass
class RawConfig:
    """Unvalidated values gathered from the YAML file and the environment."""

    url: Optional[str] = None
    token_path: str = DEFAULT_TOKEN_PATH
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"
    production: bool = False


def _apply_section(obj, raw: dict):
    """Apply dict values to a dataclass."""
    for k, v in raw.items():
        if hasattr(obj, k) and v is not None:
            setattr(obj, k, v)


def _config_path() -> Path:
    return Path(os.environ.get("COOLIFY_MCP_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()


def read_raw_config() -> RawConfig:
    """Gather YAML + env values. Nothing is validated yet."""
    cfg = RawConfig()

    path = _config_path()
    if path.exists():
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file: {e.__class__.__name__}") from e
        if not isinstance(raw, dict):
            raise ConfigError("Config file must contain a mapping")
        _apply_section(cfg, {k: raw.get(k) for k in ("url", "token_path", "timeout", "log_level")})

    # Env overrides
    if url := os.environ.get("COOLIFY_URL"):
        cfg.url = url
    elif cfg.url is None:
        cfg.url = f"http://{os.environ.get('PLATFORM_IP') or 'localhost'}:{DEFAULT_PORT}"
    if p := os.environ.get("COOLIFY_TOKEN_PATH"):
        cfg.token_path = p
    if t := os.environ.get("COOLIFY_TIMEOUT"):
        cfg.timeout = t
    if lvl := os.environ.get("COOLIFY_LOG_LEVEL"):
        cfg.log_level = lvl
    cfg.production = os.environ.get("NODE_ENV", "").strip().lower() == "production"
    return cfg


def validate_base_url(url: str, production: bool = False) -> str:
    """Check the Coolify base URL and strip any trailing slash."""
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        raise ConfigError("Invalid Coolify base URL") from None
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigError("Coolify base URL must be an absolute http(s) URL")
    if parsed.userinfo or parsed.query or parsed.fragment:
        raise ConfigError("Coolify base URL must not carry credentials, query or fragment")
    if production and parsed.scheme != "https":
        raise ConfigError("HTTPS is required for the Coolify base URL in production")
    return url.rstrip("/")


def _parse_timeout(value) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigError("Timeout must be a number of seconds") from None
    if not 0 < timeout <= 300:
        raise ConfigError("Timeout must be between 0 and 300 seconds")
    return timeout


def _parse_log_level(value) -> str:
    level = str(value).strip().upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError("Log level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
    return level


def load_token(token_path: str, allowed_dirs=None) -> str:
    """Read the bearer token from an owner-only file inside an allowed directory."""
    path = validate_token_path(token_path, allowed_dirs)
    try:
        st = path.stat()
    except OSError:
        raise AuthConfigError("Token file is missing or unreadable") from None
    if not stat.S_ISREG(st.st_mode):
        raise AuthConfigError("Token path is not a regular file")
    if st.st_mode & 0o077:
        raise AuthConfigError("Token file must be readable only by its owner (chmod 600)")
    try:
        token = path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        raise AuthConfigError("Token file is missing or unreadable") from None
    return validate_token(token)


def load_settings(env_file: Optional[Path] = None, allowed_dirs=None) -> Settings:
    """Build Settings from .env + YAML + environment and load the credential."""
    load_dotenv(env_file)
    raw = read_raw_config()
    base_url = validate_base_url(raw.url, raw.production)
    token = load_token(raw.token_path, allowed_dirs)
    settings = Settings(
        base_url=base_url,
        token=token,
        timeout=_parse_timeout(raw.timeout),
        production=raw.production,
        log_level=_parse_log_level(raw.log_level),
    )
    logger.debug("Settings loaded: %s", settings)
    return settings
