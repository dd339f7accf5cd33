# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Per-feature-server facade.

An :class:`LspServer` holds the handlers one feature implementation registered
(completion, chat, identity, ...) together with the slice of the initialize
result that implementation declared. The :class:`~.lsp_router.LspRouter` owns
every ``LspServer`` and decides which ones see which message; a facade never
talks to its siblings.

Every verb has exactly one :class:`~.slots.HandlerSlot`. Setting a handler
replaces the previous one and an unset slot turns the call into a no-op that
reports "unhandled" rather than failing.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from copy import deepcopy
import logging
from types import MappingProxyType
from typing import Any

import orjson as oj
from pydantic import BaseModel

from ..cancellation import CancellationToken
from ..connection import Connection, Methods
from ..errors import ResponseError, as_response_error
from ..types import (
    CreateFilesParams,
    CredentialsType,
    DeleteFilesParams,
    DidChangeConfigurationParams,
    DidChangeWorkspaceFoldersParams,
    DidSaveTextDocumentParams,
    ExecuteCommandParams,
    GetConfigurationFromServerParams,
    InitializedParams,
    InitializeParams,
    NotificationFollowupParams,
    NotificationParams,
    ProgressParams,
    RenameFilesParams,
    UpdateConfigurationParams,
)
from ..utils import get_logger
from .notifications import FollowupHandler, NotificationEnvelope, NotificationRouter
from .slots import UNHANDLED, DispatchResult, HandlerSlot

Handler = Callable[..., Any]


class ServerNotifications:
    """Window notification surface handed to a feature implementation."""

    def __init__(self, server: "LspServer") -> None:
        self._server = server

    async def show_notification(self, params: NotificationParams) -> str | None:
        """Send *params* to the client and return the local id used for follow-ups.

        Returns ``None`` without sending when the client did not opt into
        notifications or the server has no declared name.
        """
        return await self._server._show_notification(params)

    def on_notification_followup(self, handler: FollowupHandler | None) -> FollowupHandler | None:
        """Install the follow-up handler, replacing (and returning) any previous one.

        The handler receives the client's follow-up with ``source.id`` set to
        the local id returned by :meth:`show_notification`, not the encoded
        envelope that travelled over the wire.
        """
        return self._server._set_followup_handler(handler)


class LspServer:
    """Facade over one feature implementation's handlers and declared capabilities."""

    def __init__(self, connection: Connection, *, logger: logging.Logger | None = None) -> None:
        self._connection = connection
        self._logger = logger or get_logger("lsprouter.server")

        self._initialize = HandlerSlot[Handler]("initialize")
        self._initialized = HandlerSlot[Handler]("initialized")
        self._execute_command = HandlerSlot[Handler]("executeCommand")
        self._did_change_configuration = HandlerSlot[Handler]("didChangeConfiguration")
        self._get_server_configuration = HandlerSlot[Handler]("getConfigurationFromServer")
        self._update_configuration = HandlerSlot[Handler]("updateConfiguration")
        self._credentials_delete = HandlerSlot[Handler]("credentialsDelete")
        self._did_change_workspace_folders = HandlerSlot[Handler]("didChangeWorkspaceFolders")
        self._did_create_files = HandlerSlot[Handler]("didCreateFiles")
        self._did_delete_files = HandlerSlot[Handler]("didDeleteFiles")
        self._did_rename_files = HandlerSlot[Handler]("didRenameFiles")
        self._did_save_text_document = HandlerSlot[Handler]("didSaveTextDocument")
        self._requests: dict[str, HandlerSlot[Handler]] = {}

        self._initialize_result: dict[str, Any] = {}
        self._client_supports_notifications = False
        self._notification_router: NotificationRouter | None = None
        self._pending_followup_handler: FollowupHandler | None = None

        self.notification = ServerNotifications(self)

    # ------------------------------------------------------------------
    # Handler registration
    # ------------------------------------------------------------------

    def set_initialize_handler(self, handler: Handler | None) -> None:
        self._initialize.set(handler)

    def set_initialized_handler(self, handler: Handler | None) -> None:
        self._initialized.set(handler)

    def set_execute_command_handler(self, handler: Handler | None) -> None:
        self._execute_command.set(handler)

    def set_did_change_configuration_handler(self, handler: Handler | None) -> None:
        self._did_change_configuration.set(handler)

    def set_server_configuration_handler(self, handler: Handler | None) -> None:
        self._get_server_configuration.set(handler)

    def set_update_configuration_handler(self, handler: Handler | None) -> None:
        self._update_configuration.set(handler)

    def set_credentials_delete_handler(self, handler: Handler | None) -> None:
        self._credentials_delete.set(handler)

    def set_did_change_workspace_folders_handler(self, handler: Handler | None) -> None:
        self._did_change_workspace_folders.set(handler)

    def set_did_create_files_handler(self, handler: Handler | None) -> None:
        self._did_create_files.set(handler)

    def set_did_delete_files_handler(self, handler: Handler | None) -> None:
        self._did_delete_files.set(handler)

    def set_did_rename_files_handler(self, handler: Handler | None) -> None:
        self._did_rename_files.set(handler)

    def set_did_save_text_document_handler(self, handler: Handler | None) -> None:
        self._did_save_text_document.set(handler)

    def set_request_handler(self, method: str, handler: Handler | None) -> None:
        """Own an additional request *method*, e.g. one of the identity requests."""
        if handler is None:
            self._requests.pop(method, None)
            return
        slot = self._requests.setdefault(method, HandlerSlot[Handler](method))
        slot.set(handler)

    # ------------------------------------------------------------------
    # Declared state
    # ------------------------------------------------------------------

    @property
    def name(self) -> str | None:
        server_info = self._initialize_result.get("serverInfo")
        if isinstance(server_info, Mapping):
            name = server_info.get("name")
            return name if isinstance(name, str) and name else None
        return None

    @property
    def initialize_result(self) -> Mapping[str, Any]:
        return MappingProxyType(self._initialize_result)

    @property
    def commands(self) -> list[str]:
        provider = _lookup(self._initialize_result, "capabilities", "executeCommandProvider")
        commands = provider.get("commands") if isinstance(provider, Mapping) else None
        return list(commands) if isinstance(commands, list) else []

    @property
    def configuration_sections(self) -> list[str]:
        provider = _lookup(self._initialize_result, "awsServerCapabilities", "configurationProvider")
        sections = provider.get("sections") if isinstance(provider, Mapping) else None
        return list(sections) if isinstance(sections, list) else []

    def handles_request(self, method: str) -> bool:
        slot = self._requests.get(method)
        return slot is not None and slot.is_set

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def initialize(self, params: InitializeParams, token: CancellationToken) -> dict[str, Any]:
        """Run the initialize handler and remember the result as this server's slice.

        Raises:
            ResponseError: the handler raised, or returned a ``ResponseError``.
        """
        try:
            outcome = await self._initialize.invoke(params, token)
        except Exception as exc:
            options = params.initializationOptions.to_wire() if params.initializationOptions else None
            self._logger.error(
                "Runtime Initialization Error\nInitializationOptions: %s\nError: %s",
                oj.dumps(options).decode(),
                exc,
            )
            if isinstance(exc, ResponseError):
                raise
            raise as_response_error(exc) from exc

        if isinstance(outcome.value, ResponseError):
            raise outcome.value

        self._initialize_result = _as_result_dict(outcome.value)
        self._client_supports_notifications = params.client_supports_notifications

        name = self.name
        if name:
            self._notification_router = NotificationRouter(name, self._send_show_notification, logger=self._logger)
            if self._pending_followup_handler is not None:
                self._notification_router.on_followup(self._pending_followup_handler)
        else:
            self._notification_router = None
        return deepcopy(self._initialize_result)

    async def try_execute_command(self, params: ExecuteCommandParams, token: CancellationToken) -> DispatchResult:
        if params.command not in self.commands:
            return UNHANDLED
        return await self._execute_command.invoke(params, token)

    async def try_get_server_configuration(
        self, params: GetConfigurationFromServerParams, token: CancellationToken
    ) -> DispatchResult:
        if params.section not in self.configuration_sections:
            return UNHANDLED
        return await self._get_server_configuration.invoke(params, token)

    async def send_update_configuration_request(
        self, params: UpdateConfigurationParams, token: CancellationToken
    ) -> DispatchResult:
        return await self._update_configuration.invoke(params, token)

    async def try_handle_request(self, method: str, params: Any, token: CancellationToken) -> DispatchResult:
        slot = self._requests.get(method)
        if slot is None:
            return UNHANDLED
        return await slot.invoke(params, token)

    # ------------------------------------------------------------------
    # Notifications from the client
    # ------------------------------------------------------------------

    async def send_initialized_notification(self, params: InitializedParams) -> None:
        await self._initialized.invoke(params)

    async def send_did_change_configuration_notification(self, params: DidChangeConfigurationParams) -> None:
        await self._did_change_configuration.invoke(params)

    async def notify_credentials_deletion(self, credentials_type: CredentialsType) -> None:
        await self._credentials_delete.invoke(credentials_type)

    async def send_did_change_workspace_folders_notification(self, params: DidChangeWorkspaceFoldersParams) -> None:
        await self._did_change_workspace_folders.invoke(params)

    async def send_did_create_files_notification(self, params: CreateFilesParams) -> None:
        await self._did_create_files.invoke(params)

    async def send_did_delete_files_notification(self, params: DeleteFilesParams) -> None:
        await self._did_delete_files.invoke(params)

    async def send_did_rename_files_notification(self, params: RenameFilesParams) -> None:
        await self._did_rename_files.invoke(params)

    async def send_did_save_text_document_notification(self, params: DidSaveTextDocumentParams) -> None:
        await self._did_save_text_document.invoke(params)

    async def send_notification_followup(
        self, params: NotificationFollowupParams, envelope: NotificationEnvelope | None = None
    ) -> None:
        if self._notification_router is None:
            self._logger.debug("Dropping notification followup; server has no notification router")
            return
        await self._notification_router.process_followup(params, envelope)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send_progress(self, token: str | int, value: Any) -> None:
        payload = value.model_dump(mode="json", exclude_none=True) if isinstance(value, BaseModel) else value
        progress = ProgressParams(token=token, value=payload)
        await self._connection.send_notification(Methods.PROGRESS, progress.to_wire())

    async def send_notification(self, method: str, params: Any) -> None:
        """Send an arbitrary server-to-client notification (e.g. ``aws/identity/ssoTokenChanged``)."""
        payload = params.model_dump(mode="json", exclude_none=True) if isinstance(params, BaseModel) else params
        await self._connection.send_notification(method, payload)

    async def _show_notification(self, params: NotificationParams) -> str | None:
        if not self._client_supports_notifications:
            self._logger.debug("Client does not accept notifications; dropping %r", params.content.text)
            return None
        if self._notification_router is None:
            self._logger.debug("Server has no declared name; dropping notification %r", params.content.text)
            return None
        envelope = await self._notification_router.send(params)
        return envelope.id

    async def _send_show_notification(self, params: NotificationParams) -> None:
        await self._connection.send_notification(Methods.SHOW_NOTIFICATION, params.to_wire())

    def _set_followup_handler(self, handler: FollowupHandler | None) -> FollowupHandler | None:
        if self._notification_router is not None:
            previous = self._notification_router.on_followup(handler)
        else:
            previous = self._pending_followup_handler
        self._pending_followup_handler = handler
        return previous

    def __repr__(self) -> str:
        return f"LspServer(name={self.name!r})"


def _lookup(mapping: Mapping[str, Any], *keys: str) -> Any:
    current: Any = mapping
    for key in keys:
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def _as_result_dict(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, Mapping):
        return deepcopy(dict(value))
    raise TypeError(f"initialize handler must return a mapping, got {type(value).__name__}")


__all__ = ["LspServer", "ServerNotifications"]
