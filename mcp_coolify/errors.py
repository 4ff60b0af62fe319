"""Error taxonomy for the Coolify MCP server."""

from __future__ import annotations


class CoolifyMCPError(Exception):
    """Base class for all server errors."""


# ─── Startup ──────────────────────────────────────────────────────────────────


class ConfigError(CoolifyMCPError):
    """Unrecoverable configuration problem detected at startup."""


class AuthConfigError(ConfigError):
    """The API credential is missing, unreadable or malformed."""


# ─── Per-request ──────────────────────────────────────────────────────────────


class ValidationError(CoolifyMCPError):
    """Caller input failed a shape, format or bounds check."""


class TransportError(CoolifyMCPError):
    """An upstream call failed. The message is always one of MESSAGES."""

    AUTHENTICATION_FAILED = "AuthenticationFailed"
    ACCESS_DENIED = "AccessDenied"
    NOT_FOUND = "NotFound"
    UPSTREAM_SERVER_ERROR = "UpstreamServerError"
    REQUEST_FAILED = "RequestFailed"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    REQUEST_TIMEOUT = "RequestTimeout"
    NETWORK_ERROR = "NetworkError"

    MESSAGES = {
        AUTHENTICATION_FAILED: "Authentication failed",
        ACCESS_DENIED: "Access denied",
        NOT_FOUND: "Resource not found",
        UPSTREAM_SERVER_ERROR: "Upstream server error",
        REQUEST_FAILED: "Request failed",
        SERVICE_UNAVAILABLE: "Service unavailable",
        REQUEST_TIMEOUT: "Request timeout",
        NETWORK_ERROR: "Network error",
    }

    def __init__(self, kind: str, *, status_code: int | None = None) -> None:
        super().__init__(self.MESSAGES.get(kind, self.MESSAGES[self.NETWORK_ERROR]))
        self.kind = kind
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int) -> "TransportError":
        if status_code == 401:
            kind = cls.AUTHENTICATION_FAILED
        elif status_code == 403:
            kind = cls.ACCESS_DENIED
        elif status_code == 404:
            kind = cls.NOT_FOUND
        elif status_code >= 500:
            kind = cls.UPSTREAM_SERVER_ERROR
        else:
            kind = cls.REQUEST_FAILED
        return cls(kind, status_code=status_code)


class ResponseFormatError(CoolifyMCPError):
    """A 2xx upstream body did not have the expected shape."""

    def __init__(self, message: str = "Unexpected response format") -> None:
        super().__init__(message)


# ─── Protocol ─────────────────────────────────────────────────────────────────


class McpError(CoolifyMCPError):
    """Protocol-level failure reported per line by the session loop."""

    code = -1


class UnknownToolError(McpError):
    def __init__(self, name: object) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UnknownMethodError(McpError):
    def __init__(self, method: object) -> None:
        super().__init__(f"Unknown method: {method}")
        self.method = method


class InvalidRequestError(McpError):
    """The request line decoded, but not into a usable request."""
