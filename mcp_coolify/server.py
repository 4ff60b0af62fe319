#!/usr/bin/env python3
"""
MCP Coolify Server - Coolify application lifecycle over MCP
===========================================================
Exposes the Coolify REST API to AI agents as MCP tools:
- Applications: list, get, deploy, stop, restart, logs
- Deployments: status, list
- Webhooks: create (per application)
- Servers: info

Reads one JSON request per line on stdin, writes one JSON response per line
on stdout. Per-line errors go to stderr as {"error": {"code": -1, ...}}.

Usage:
    python -m mcp_coolify

    # With custom API URL and token file
    COOLIFY_URL=https://coolify.example.com COOLIFY_TOKEN_PATH=~/.coolify-token python -m mcp_coolify

    # Live smoke test against the configured instance
    python -m mcp_coolify --test
"""

import argparse
import asyncio
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, TextIO

from .client import CoolifyClient
from .config import Settings, load_settings
from .errors import ConfigError, InvalidRequestError, McpError, UnknownMethodError, UnknownToolError
from .operations import OPERATIONS, CoolifyOperations
from .registry import TOOL_SCHEMAS, ToolName

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 65536
MAX_LINE_BYTES = 1024 * 1024

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(name: str) -> str:
    return _CAMEL_RE.sub("_", name).lower()


# ─── Dispatcher ───────────────────────────────────────────────────────────────


class Dispatcher:
    """Routes one decoded request to tools/list or a tool operation."""

    def __init__(self, operations: CoolifyOperations):
        self.operations = operations

    async def handle(self, request: Any) -> Dict:
        if not isinstance(request, dict):
            raise InvalidRequestError("Invalid request: expected a JSON object")
        method = request.get("method")
        params = request.get("params")
        if params is None:
            params = {}

        if method == "tools/list":
            return {"tools": TOOL_SCHEMAS}
        if method == "tools/call":
            return await self.call_tool(params)
        raise UnknownMethodError(method)

    async def call_tool(self, params: Any) -> Dict:
        if not isinstance(params, dict):
            raise InvalidRequestError("Invalid request: params must be an object")
        name = params.get("name")
        try:
            tool = ToolName(name)
        except ValueError:
            raise UnknownToolError(name) from None

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidRequestError("Invalid request: arguments must be an object")

        op = OPERATIONS[tool]
        kwargs = {_snake(k): arguments[k] for k in op.params if k in arguments}
        logger.debug("tools/call %s", tool.value)
        result = await getattr(self.operations, op.method)(**kwargs)
        return {"content": [{"type": "text", "text": json.dumps(result, default=str, indent=2)}]}


# ─── Session loop ─────────────────────────────────────────────────────────────


def error_frame(message: str, code: int = -1) -> Dict:
    return {"error": {"code": code, "message": message}}


def stdin_reader(stream=None) -> Callable[[], Awaitable[bytes]]:
    """Chunked, non-blocking reads from stdin (b"" at end of stream)."""
    source = stream if stream is not None else sys.stdin.buffer

    async def read_chunk() -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, source.read1, READ_CHUNK_SIZE)

    return read_chunk


class SessionLoop:
    """Buffers input, splits it into lines and handles them one at a time.

    Each line is fully handled (including its upstream call) before the next
    one is looked at, so two requests are never in flight together.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        read_chunk: Callable[[], Awaitable[bytes]],
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        max_line_bytes: int = MAX_LINE_BYTES,
    ):
        self.dispatcher = dispatcher
        self.read_chunk = read_chunk
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.max_line_bytes = max_line_bytes
        self._buffer = bytearray()
        # Set while skipping the rest of an oversized line
        self._overflow = False

    async def run(self) -> None:
        while True:
            chunk = await self.read_chunk()
            if not chunk:
                break
            self._buffer += chunk
            while (idx := self._buffer.find(b"\n")) != -1:
                line = bytes(self._buffer[:idx])
                del self._buffer[: idx + 1]
                if self._overflow:
                    self._overflow = False
                elif len(line) > self.max_line_bytes:
                    self._line_too_long()
                else:
                    await self.handle_line(line)
            if len(self._buffer) > self.max_line_bytes:
                if not self._overflow:
                    self._line_too_long()
                    self._overflow = True
                self._buffer.clear()

        if self._buffer.strip():
            logger.debug("Discarding %d bytes of unterminated input", len(self._buffer))
        self._buffer.clear()

    def _line_too_long(self) -> None:
        logger.warning("Dropping request line longer than %d bytes", self.max_line_bytes)
        self._write(self.stderr, error_frame("Parse error: line too long"))

    async def handle_line(self, raw: bytes) -> None:
        try:
            text = raw.rstrip(b"\r").decode("utf-8")
        except UnicodeDecodeError:
            self._write(self.stderr, error_frame("Parse error: invalid UTF-8"))
            return
        if not text.strip():
            return

        try:
            request = json.loads(text)
        except (ValueError, RecursionError):
            self._write(self.stderr, error_frame("Parse error: invalid JSON"))
            return

        try:
            response = await self.dispatcher.handle(request)
        except McpError as e:
            self._write(self.stderr, error_frame(str(e), e.code))
            return
        except Exception:
            logger.exception("Unhandled error while handling request")
            self._write(self.stderr, error_frame("Internal error"))
            return
        self._write(self.stdout, response)

    @staticmethod
    def _write(stream: TextIO, msg: Dict) -> None:
        stream.write(json.dumps(msg, default=str, separators=(",", ":")) + "\n")
        stream.flush()


# ─── Entry points ─────────────────────────────────────────────────────────────


async def serve(
    settings: Settings,
    read_chunk: Optional[Callable[[], Awaitable[bytes]]] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
    transport=None,
) -> None:
    async with CoolifyClient(settings, transport=transport) as client:
        dispatcher = Dispatcher(CoolifyOperations(client))
        logger.info("Coolify MCP server starting")
        logger.info("  API: %s", settings.api_url)
        logger.info("  Tools: %d", len(TOOL_SCHEMAS))
        await SessionLoop(dispatcher, read_chunk or stdin_reader(), stdout, stderr).run()
        logger.info("Coolify MCP server shutting down")


async def smoke_test(settings: Settings, transport=None) -> int:
    """Live check: server info, applications, then the MCP handlers."""
    async with CoolifyClient(settings, transport=transport) as client:
        ops = CoolifyOperations(client)
        dispatcher = Dispatcher(ops)

        print("=== coolify_get_server_info ===")
        info = await ops.get_server_info()
        print(json.dumps(info, default=str, indent=2))
        if not info["success"]:
            return 1

        print("\n=== coolify_list_applications ===")
        apps = await ops.list_applications()
        if apps["success"]:
            print(f"Found {apps['count']} applications")
        else:
            print(f"List applications failed: {apps['error']}")

        print("\n=== tools/list ===")
        listing = await dispatcher.handle({"method": "tools/list", "params": {}})
        print(f"{len(listing['tools'])} tools available")

        print("\n=== tools/call coolify_list_applications ===")
        call = await dispatcher.handle(
            {"method": "tools/call", "params": {"name": ToolName.LIST_APPLICATIONS.value, "arguments": {}}}
        )
        data = json.loads(call["content"][0]["text"])
        print(f"Found {data.get('count', 0)} applications via MCP")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="coolify-mcp", description="Coolify MCP server (stdio)")
    parser.add_argument("--test", action="store_true", help="run a live smoke test and exit")
    parser.add_argument("--env-file", type=Path, default=None, help="path to a .env file")
    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = load_settings(args.env_file)
    except ConfigError as e:
        print(f"Failed to start Coolify MCP server: {e}", file=sys.stderr)
        return 1
    logging.getLogger().setLevel(settings.log_level)

    if args.test:
        return asyncio.run(smoke_test(settings))
    asyncio.run(serve(settings))
    return 0


if __name__ == "__main__":
    sys.exit(main())
