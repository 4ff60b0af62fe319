"""Static tool catalog served by tools/list."""

from enum import Enum
from typing import Dict, List


class ToolName(str, Enum):
    LIST_APPLICATIONS = "coolify_list_applications"
    GET_APPLICATION = "coolify_get_application"
    DEPLOY_APPLICATION = "coolify_deploy_application"
    GET_DEPLOYMENT_STATUS = "coolify_get_deployment_status"
    LIST_DEPLOYMENTS = "coolify_list_deployments"
    STOP_APPLICATION = "coolify_stop_application"
    RESTART_APPLICATION = "coolify_restart_application"
    GET_APPLICATION_LOGS = "coolify_get_application_logs"
    LIST_WEBHOOKS = "coolify_list_webhooks"
    CREATE_WEBHOOK = "coolify_create_webhook"
    GET_SERVER_INFO = "coolify_get_server_info"


_UUID_PROP = {"uuid": {"type": "string", "description": "Application UUID"}}

TOOL_SCHEMAS: List[Dict] = [
    {
        "name": ToolName.LIST_APPLICATIONS.value,
        "description": "List all applications in Coolify",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": ToolName.GET_APPLICATION.value,
        "description": "Get details of a specific application",
        "inputSchema": {"type": "object", "properties": dict(_UUID_PROP), "required": ["uuid"]},
    },
    {
        "name": ToolName.DEPLOY_APPLICATION.value,
        "description": "Deploy an application",
        "inputSchema": {
            "type": "object",
            "properties": {
                **_UUID_PROP,
                "forceRebuild": {
                    "type": "boolean",
                    "description": "Force rebuild the application",
                },
            },
            "required": ["uuid"],
        },
    },
    {
        "name": ToolName.GET_DEPLOYMENT_STATUS.value,
        "description": "Get deployment status of an application",
        "inputSchema": {"type": "object", "properties": dict(_UUID_PROP), "required": ["uuid"]},
    },
    {
        "name": ToolName.LIST_DEPLOYMENTS.value,
        "description": "List deployments for an application",
        "inputSchema": {"type": "object", "properties": dict(_UUID_PROP), "required": ["uuid"]},
    },
    {
        "name": ToolName.STOP_APPLICATION.value,
        "description": "Stop an application",
        "inputSchema": {"type": "object", "properties": dict(_UUID_PROP), "required": ["uuid"]},
    },
    {
        "name": ToolName.RESTART_APPLICATION.value,
        "description": "Restart an application",
        "inputSchema": {"type": "object", "properties": dict(_UUID_PROP), "required": ["uuid"]},
    },
    {
        "name": ToolName.GET_APPLICATION_LOGS.value,
        "description": "Get application logs",
        "inputSchema": {
            "type": "object",
            "properties": {
                **_UUID_PROP,
                "lines": {
                    "type": "number",
                    "description": "Number of log lines to fetch (default: 100, max: 10000)",
                },
                "since": {
                    "type": "string",
                    "description": "Time duration to fetch logs from, e.g. 30s, 5m, 2h, 1d (default: 1h)",
                },
            },
            "required": ["uuid"],
        },
    },
    {
        "name": ToolName.LIST_WEBHOOKS.value,
        "description": "List all webhooks (not supported globally; webhooks are per application)",
        "inputSchema": {"type": "object", "properties": {}},
    },
    {
        "name": ToolName.CREATE_WEBHOOK.value,
        "description": "Create a webhook for an application",
        "inputSchema": {
            "type": "object",
            "properties": {
                "applicationUuid": {"type": "string", "description": "Application UUID"},
                "name": {"type": "string", "description": "Webhook name"},
                "url": {"type": "string", "description": "Webhook URL (http or https)"},
                "secret": {"type": "string", "description": "Webhook secret"},
            },
            "required": ["applicationUuid", "name", "url"],
        },
    },
    {
        "name": ToolName.GET_SERVER_INFO.value,
        "description": "Get Coolify server information",
        "inputSchema": {"type": "object", "properties": {}},
    },
]
