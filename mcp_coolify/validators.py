"""
Input validation for everything that crosses the MCP boundary.
==============================================================

Every value that ends up in a URL, a request body or the Authorization header
goes through one of these checks first:
  - validate_token_path()       credential file must live in a sanctioned directory
  - validate_token()            bearer token length and character set
  - validate_uuid()             application identifiers (no path tricks)
  - validate_log_options()      LogQuery bounds and duration format
  - validate_webhook_payload()  WebhookSpec shape, name charset, http(s) url

Error messages describe the rule that failed, never the rejected value.
"""

from __future__ import annotations

import math
import os
import re
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

import httpx
import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import AuthConfigError, ConfigError, ValidationError

# ── Credential ──
ALLOWED_TOKEN_DIRS = ("~", "/root", "/etc/coolify", "/run/secrets", "/var/run/secrets")
TOKEN_MIN_LENGTH = 20
TOKEN_MAX_LENGTH = 500
_TOKEN_FORBIDDEN = frozenset("<>\"'&\r\n\t")

# ── Identifiers ──
_UUID_V4_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}", re.I
)
_PLATFORM_ID_RE = re.compile(r"[A-Za-z0-9]{20,28}")
_UUID_FORBIDDEN = ("/", "\\", "..", ".", "%")

# ── Logs ──
MIN_LOG_LINES = 1
MAX_LOG_LINES = 10_000
DEFAULT_LOG_LINES = 100
DEFAULT_LOG_SINCE = "1h"
_INT_TEXT_RE = re.compile(r"[+-]?[0-9]+")

# ── Webhooks ──
WEBHOOK_NAME_MAX = 100
_WEBHOOK_SCHEMES = ("http", "https")


# ─── Models ───────────────────────────────────────────────────────────────────


def _coerce_lines(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("lines must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError("lines must be a whole number")
        return int(value)
    if isinstance(value, str) and _INT_TEXT_RE.fullmatch(value.strip()):
        return int(value.strip())
    raise ValueError("lines must be a number")


class LogQuery(BaseModel):
    """Query parameters for the application logs endpoint."""

    model_config = ConfigDict(frozen=True)

    lines: int = Field(default=DEFAULT_LOG_LINES, ge=MIN_LOG_LINES, le=MAX_LOG_LINES)
    since: str = Field(default=DEFAULT_LOG_SINCE, pattern=r"^[0-9]+[smhd]$")

    @field_validator("lines", mode="before")
    @classmethod
    def lines_to_int(cls, v):
        return _coerce_lines(v)

    def as_params(self) -> dict:
        return {"lines": self.lines, "since": self.since}


class WebhookSpec(BaseModel):
    """A webhook to register on one application."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=WEBHOOK_NAME_MAX, pattern=r"^[A-Za-z0-9\-_\s]+$")
    url: str = Field(min_length=1, max_length=2048)
    secret: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("url")
    @classmethod
    def url_absolute_http(cls, v: str) -> str:
        try:
            parsed = httpx.URL(v)
        except (httpx.InvalidURL, TypeError, ValueError):
            raise ValueError("url is not a valid URL") from None
        if parsed.scheme not in _WEBHOOK_SCHEMES or not parsed.host:
            raise ValueError("url must be an absolute http or https URL")
        return v

    def as_body(self) -> dict:
        return self.model_dump(exclude_none=True)


_LOG_MESSAGES = {
    "lines": f"lines must be an integer between {MIN_LOG_LINES} and {MAX_LOG_LINES}",
    "since": "since must be a duration such as 30s, 5m, 2h or 1d",
}

_WEBHOOK_MESSAGES = {
    "name": (
        f"Webhook name is required and may only contain letters, digits, spaces, "
        f"'-' and '_' (max {WEBHOOK_NAME_MAX} characters)"
    ),
    "url": "Webhook url must be an absolute http or https URL",
    "secret": "Webhook secret must be a string",
}


def _first_error_field(exc: pydantic.ValidationError) -> str:
    errors = exc.errors()
    if errors and errors[0].get("loc"):
        return str(errors[0]["loc"][0])
    return ""


# ─── Credential ───────────────────────────────────────────────────────────────


def validate_token_path(
    path: Union[str, "os.PathLike[str]"],
    allowed_dirs: Optional[Iterable[Union[str, Path]]] = None,
) -> Path:
    """Resolve a credential path and make sure it sits inside an allowed directory.

    Symlinks are resolved first, so a link inside an allowed directory that
    points elsewhere is rejected.
    """
    if not isinstance(path, (str, os.PathLike)) or not str(path).strip():
        raise ConfigError("Token path is empty")
    resolved = Path(path).expanduser().resolve()
    for base in allowed_dirs if allowed_dirs is not None else ALLOWED_TOKEN_DIRS:
        root = Path(base).expanduser().resolve()
        if resolved == root:
            continue
        try:
            resolved.relative_to(root)
        except ValueError:
            continue
        return resolved
    raise ConfigError("Token path is outside the allowed secret directories")


def validate_token(token: Any) -> str:
    if not isinstance(token, str):
        raise AuthConfigError("API token must be a string")
    if not TOKEN_MIN_LENGTH <= len(token) <= TOKEN_MAX_LENGTH:
        raise AuthConfigError(
            f"API token must be between {TOKEN_MIN_LENGTH} and {TOKEN_MAX_LENGTH} characters"
        )
    if any(ch in _TOKEN_FORBIDDEN for ch in token):
        raise AuthConfigError("API token contains forbidden characters")
    return token


# ─── Request inputs ───────────────────────────────────────────────────────────


def validate_uuid(value: Any, field: str = "uuid") -> str:
    """Accept a UUID v4 or a 20-28 char alphanumeric Coolify id, unchanged."""
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{field} is required")
    if any(bad in value for bad in _UUID_FORBIDDEN):
        raise ValidationError(f"Invalid {field}: contains forbidden characters")
    if not (_UUID_V4_RE.fullmatch(value) or _PLATFORM_ID_RE.fullmatch(value)):
        raise ValidationError(f"Invalid {field} format")
    return value


def validate_log_options(options: Optional[Mapping[str, Any]] = None) -> LogQuery:
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise ValidationError("Log options must be an object")
    fields = {k: options[k] for k in ("lines", "since") if options.get(k) is not None}
    try:
        return LogQuery(**fields)
    except pydantic.ValidationError as exc:
        field = _first_error_field(exc)
        raise ValidationError(_LOG_MESSAGES.get(field, "Invalid log options")) from None


def validate_webhook_payload(payload: Any) -> WebhookSpec:
    if not isinstance(payload, Mapping):
        raise ValidationError("Webhook payload must be an object")
    fields = {k: payload[k] for k in ("name", "url", "secret") if k in payload}
    if fields.get("secret") is None:
        fields.pop("secret", None)
    try:
        return WebhookSpec(**fields)
    except pydantic.ValidationError as exc:
        field = _first_error_field(exc)
        raise ValidationError(_WEBHOOK_MESSAGES.get(field, "Invalid webhook payload")) from None
