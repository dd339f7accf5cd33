# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Shared test helpers for router tests."""

from __future__ import annotations

from typing import Any, Mapping

import anyio

from lsprouter.cancellation import NONE, CancellationToken
from lsprouter.router import LspRouter, LspServer


class RecordingConnection:
    """In-memory connection that captures bound handlers and outbound traffic."""

    def __init__(self) -> None:
        self.request_handlers: dict[str, Any] = {}
        self.notification_handlers: dict[str, Any] = {}
        self.notifications: list[tuple[str, Any]] = []
        self.telemetry_events: list[Mapping[str, Any]] = []

    def on_request(self, method: str, handler: Any) -> None:
        self.request_handlers[method] = handler

    def on_notification(self, method: str, handler: Any) -> None:
        self.notification_handlers[method] = handler

    async def send_notification(self, method: str, params: Any) -> None:
        await anyio.lowlevel.checkpoint()
        self.notifications.append((method, params))

    async def send_telemetry_event(self, event: Mapping[str, Any]) -> None:
        await anyio.lowlevel.checkpoint()
        self.telemetry_events.append(dict(event))

    async def request(self, method: str, params: Any = None, token: CancellationToken = NONE) -> Any:
        """Deliver a client request the way the transport would."""
        return await self.request_handlers[method](params, token)

    async def notify(self, method: str, params: Any = None) -> None:
        await self.notification_handlers[method](params)


class FailingTelemetryConnection(RecordingConnection):
    async def send_telemetry_event(self, event: Mapping[str, Any]) -> None:
        raise RuntimeError("telemetry sink unavailable")


def make_server(
    connection: RecordingConnection,
    *,
    initialize_result: Mapping[str, Any] | None = None,
    name: str | None = None,
) -> LspServer:
    """Build a facade whose initialize handler returns *initialize_result*."""
    server = LspServer(connection)
    result: dict[str, Any] = dict(initialize_result or {})
    if name is not None:
        result.setdefault("serverInfo", {"name": name})
    server.set_initialize_handler(lambda _params, _token: result)
    return server


def commands_result(*commands: str, name: str | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"capabilities": {"executeCommandProvider": {"commands": list(commands)}}}
    if name is not None:
        result["serverInfo"] = {"name": name}
    return result


def sections_result(*sections: str, name: str | None = None) -> dict[str, Any]:
    result: dict[str, Any] = {"awsServerCapabilities": {"configurationProvider": {"sections": list(sections)}}}
    if name is not None:
        result["serverInfo"] = {"name": name}
    return result


def build_router(connection: RecordingConnection, *servers: LspServer) -> LspRouter:
    router = LspRouter(connection)
    for server in servers:
        router.register(server)
    return router
