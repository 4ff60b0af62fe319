"""
Coolify MCP operations: one coroutine per tool.
===============================================
Each operation validates its inputs, issues exactly one API call and reshapes
the payload into a result envelope. Validation, transport and decode failures
come back as {"success": False, "error": ...}; nothing raises past here.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .client import CoolifyClient
from .errors import ResponseFormatError, TransportError, ValidationError
from .registry import ToolName
from .validators import validate_log_options, validate_uuid, validate_webhook_payload

logger = logging.getLogger(__name__)

WEBHOOKS_GLOBAL_UNSUPPORTED = (
    "Webhooks are application-specific. "
    "Use application UUID to get webhooks for a specific app."
)

_TRUE_STRINGS = ("true", "1", "yes", "on")


def unwrap(payload: Any, expected=(dict, list)) -> Any:
    """Return payload["data"] if enveloped, else the raw payload, if it has the expected type."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), expected):
        return payload["data"]
    if isinstance(payload, expected):
        return payload
    raise ResponseFormatError()


def coerce_flag(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def failure(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}


def safe_operation(func):
    """Turn validation/transport/decode errors into a failure envelope."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> Dict[str, Any]:
        try:
            return await func(*args, **kwargs)
        except (ValidationError, TransportError, ResponseFormatError) as e:
            logger.info("%s failed: %s", func.__name__, e)
            return failure(str(e))

    return wrapper


class CoolifyOperations:
    """Application lifecycle operations backed by one CoolifyClient."""

    def __init__(self, client: CoolifyClient):
        self.client = client

    @safe_operation
    async def list_applications(self) -> Dict[str, Any]:
        apps = unwrap(await self.client.get("/applications"), expected=list)
        return {"success": True, "applications": apps, "count": len(apps)}

    @safe_operation
    async def get_application(self, uuid: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        data = await self.client.get(f"/applications/{uuid}")
        return {"success": True, "application": unwrap(data)}

    @safe_operation
    async def deploy_application(self, uuid: Any = None, force_rebuild: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        body = {"force_rebuild": coerce_flag(force_rebuild)}
        data = await self.client.post(f"/applications/{uuid}/deploy", body)
        logger.info("Deployment requested for %s (force_rebuild=%s)", uuid, body["force_rebuild"])
        return {
            "success": True,
            "deployment": unwrap(data),
            "message": "Deployment initiated successfully",
        }

    @safe_operation
    async def get_deployment_status(self, uuid: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        data = await self.client.get(f"/applications/{uuid}/status")
        return {"success": True, "status": unwrap(data)}

    @safe_operation
    async def list_deployments(self, uuid: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        data = await self.client.get(f"/applications/{uuid}/deployments")
        return {"success": True, "deployments": unwrap(data, expected=list)}

    @safe_operation
    async def stop_application(self, uuid: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        data = await self.client.post(f"/applications/{uuid}/stop")
        logger.info("Stop requested for %s", uuid)
        return {
            "success": True,
            "message": "Application stopped successfully",
            "result": unwrap(data),
        }

    @safe_operation
    async def restart_application(self, uuid: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        data = await self.client.post(f"/applications/{uuid}/restart")
        logger.info("Restart requested for %s", uuid)
        return {
            "success": True,
            "message": "Application restarted successfully",
            "result": unwrap(data),
        }

    @safe_operation
    async def get_application_logs(self, uuid: Any = None, lines: Any = None, since: Any = None) -> Dict[str, Any]:
        uuid = validate_uuid(uuid)
        query = validate_log_options({"lines": lines, "since": since})
        data = await self.client.get(f"/applications/{uuid}/logs", params=query.as_params())
        return {"success": True, "logs": unwrap(data, expected=(dict, list, str))}

    async def list_webhooks(self) -> Dict[str, Any]:
        # The API only exposes webhooks per application.
        return failure(WEBHOOKS_GLOBAL_UNSUPPORTED)

    @safe_operation
    async def create_webhook(
        self,
        application_uuid: Any = None,
        name: Any = None,
        url: Any = None,
        secret: Any = None,
    ) -> Dict[str, Any]:
        uuid = validate_uuid(application_uuid, field="applicationUuid")
        spec = validate_webhook_payload({"name": name, "url": url, "secret": secret})
        data = await self.client.post(f"/applications/{uuid}/webhooks", spec.as_body())
        logger.info("Webhook %r created for %s", spec.name, uuid)
        return {
            "success": True,
            "webhook": unwrap(data),
            "message": "Webhook created successfully",
        }

    @safe_operation
    async def get_server_info(self) -> Dict[str, Any]:
        data = await self.client.get("/servers")
        return {
            "success": True,
            "servers": data,
            "count": len(data) if isinstance(data, list) else 1,
        }


# ─── Argument contracts ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Operation:
    """Binds a tool to a CoolifyOperations method and the arguments it reads.

    Argument names are the MCP (camelCase) names; they are passed to the
    method as snake_case keywords.
    """

    method: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()

    @property
    def params(self) -> Tuple[str, ...]:
        return self.required + self.optional


OPERATIONS: Dict[ToolName, Operation] = {
    ToolName.LIST_APPLICATIONS: Operation("list_applications"),
    ToolName.GET_APPLICATION: Operation("get_application", ("uuid",)),
    ToolName.DEPLOY_APPLICATION: Operation("deploy_application", ("uuid",), ("forceRebuild",)),
    ToolName.GET_DEPLOYMENT_STATUS: Operation("get_deployment_status", ("uuid",)),
    ToolName.LIST_DEPLOYMENTS: Operation("list_deployments", ("uuid",)),
    ToolName.STOP_APPLICATION: Operation("stop_application", ("uuid",)),
    ToolName.RESTART_APPLICATION: Operation("restart_application", ("uuid",)),
    ToolName.GET_APPLICATION_LOGS: Operation("get_application_logs", ("uuid",), ("lines", "since")),
    ToolName.LIST_WEBHOOKS: Operation("list_webhooks"),
    ToolName.CREATE_WEBHOOK: Operation(
        "create_webhook", ("applicationUuid", "name", "url"), ("secret",)
    ),
    ToolName.GET_SERVER_INFO: Operation("get_server_info"),
}
