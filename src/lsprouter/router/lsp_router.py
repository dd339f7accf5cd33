# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""The router bound to the client connection.

:class:`LspRouter` is the only object the transport talks to. It owns the
ordered registry of :class:`~.server.LspServer` facades, the workspace folder
set and the merged initialize result, and implements the policy for each verb:

* sequential, short-circuiting phases - ``initialize``, ``executeCommand``,
  ``getConfigurationFromServer`` and vendor requests visit servers one at a
  time in registration order;
* concurrent fan-out - ``updateConfiguration`` (the first rejection cancels the
  other updates and fails the call) and the lifecycle notifications (failures
  are logged and swallowed).

Registration order is the tie-break everywhere: the first server to declare a
command, configuration section or capability value wins.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from copy import deepcopy
from functools import partial
import logging
from typing import Any, Final, TypeVar

import anyio
from mcp import types as jsonrpc
from pydantic import BaseModel, ValidationError

from .. import identity
from ..cancellation import NONE, CancellationToken
from ..config import RuntimeConfig
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
    RenameFilesParams,
    UpdateConfigurationParams,
    WorkspaceFolder,
)
from ..utils import get_logger
from .merge import merge_initialize_results
from .notifications import InvalidEnvelopeError, NotificationEnvelope
from .server import LspServer
from .slots import UNHANDLED, DispatchResult
from .workspace import WorkspaceFolderSet

SERVER_CAPABILITIES_CONFIGURATION_SECTION: Final[str] = "aws.serverCapabilities"

INITIALIZATION_VALIDATION_EVENT: Final[str] = "runtimeInitialization_validation"

ModelT = TypeVar("ModelT", bound=BaseModel)


class LspRouter:
    """Presents every registered feature server to the client as one server."""

    def __init__(
        self,
        connection: Connection,
        config: RuntimeConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._connection = connection
        self._config = config or RuntimeConfig()
        self._logger = logger or get_logger("lsprouter.router")
        self._servers: list[LspServer] = []
        self._workspace_folders = WorkspaceFolderSet()
        self._initialize_result: dict[str, Any] | None = None
        self._client_initialize_params: InitializeParams | None = None

        self._bind(connection)

    # ------------------------------------------------------------------
    # Registry and state
    # ------------------------------------------------------------------

    def register(self, server: LspServer) -> LspServer:
        """Append *server* to the registry; earlier registrations take precedence."""
        if any(existing is server for existing in self._servers):
            raise ValueError(f"{server!r} is already registered")
        self._servers.append(server)
        return server

    @property
    def servers(self) -> tuple[LspServer, ...]:
        return tuple(self._servers)

    @property
    def initialize_result(self) -> Mapping[str, Any] | None:
        return deepcopy(self._initialize_result)

    def get_all_workspace_folders(self) -> list[WorkspaceFolder]:
        return self._workspace_folders.as_list()

    @property
    def client_initialize_params(self) -> InitializeParams | None:
        """Params of the last initialize request, as received.

        Fields the model does not declare are kept as extras, so
        ``model_dump(exclude_unset=True)`` gives back the raw payload.
        """
        return self._client_initialize_params

    # ------------------------------------------------------------------
    # Initialize handshake
    # ------------------------------------------------------------------

    async def initialize(self, params: InitializeParams, token: CancellationToken = NONE) -> dict[str, Any]:
        """Initialize every server in order and return the merged result.

        Raises:
            ResponseError: the first server failure, verbatim, or a duplicate
                server name error. No partial result is published.
        """
        self._client_initialize_params = params
        self._initialize_result = None
        self._workspace_folders = WorkspaceFolderSet.from_initialize_params(params)
        if not self._workspace_folders:
            self._logger.info("No workspace folders found in initialization parameters")

        if params.aws is None:
            await self._report_missing_vendor_configuration(params)

        results: list[dict[str, Any]] = []
        for server in self._servers:
            try:
                results.append(await server.initialize(params, token))
            except ResponseError:
                raise
            except Exception as exc:
                raise as_response_error(exc) from exc

        duplicates = _duplicate_names(server.name for server in self._servers)
        if duplicates:
            raise ResponseError(jsonrpc.INTERNAL_ERROR, f"Duplicate servers defined: {', '.join(duplicates)}")

        self._initialize_result = merge_initialize_results([self._config.default_initialize_result(), *results])
        return deepcopy(self._initialize_result)

    async def _report_missing_vendor_configuration(self, params: InitializeParams) -> None:
        client_name = params.clientInfo.name if params.clientInfo else None
        self._logger.info(
            "Unknown client: initializationOptions.aws is missing from InitializeParams (clientInfo: %s)",
            client_name,
        )
        event = {
            "name": INITIALIZATION_VALIDATION_EVENT,
            "result": "Failed",
            "data": {"clientName": client_name},
            "errorData": {"reason": "aws field is not defined in InitializeParams.initializationOptions"},
        }
        try:
            await self._connection.send_telemetry_event(event)
        except Exception:
            self._logger.warning("Failed to emit %s telemetry event", INITIALIZATION_VALIDATION_EVENT, exc_info=True)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def execute_command(self, params: ExecuteCommandParams, token: CancellationToken = NONE) -> DispatchResult:
        for server in self._servers:
            if params.command in server.commands:
                return await self._delegate(server.try_execute_command(params, token))
        self._logger.debug("No server declared command %s", params.command)
        return UNHANDLED

    async def get_configuration_from_server(
        self, params: GetConfigurationFromServerParams, token: CancellationToken = NONE
    ) -> DispatchResult:
        if params.section == SERVER_CAPABILITIES_CONFIGURATION_SECTION:
            capabilities = (self._initialize_result or {}).get("awsServerCapabilities")
            return DispatchResult.of(deepcopy(capabilities))

        for server in self._servers:
            if params.section in server.configuration_sections:
                return await self._delegate(server.try_get_server_configuration(params, token))
        self._logger.debug("No server declared configuration section %s", params.section)
        return UNHANDLED

    async def update_configuration(self, params: UpdateConfigurationParams, token: CancellationToken = NONE) -> None:
        """Send *params* to every server concurrently, failing fast.

        The first rejection cancels the updates still in flight and is raised
        straight away. When several servers have already failed by then, the
        error of the earliest-registered one wins.
        """
        servers = tuple(self._servers)
        failures: list[Exception | None] = [None] * len(servers)

        async with anyio.create_task_group() as tg:

            async def _update(index: int, server: LspServer) -> None:
                try:
                    await server.send_update_configuration_request(params, token)
                except Exception as exc:
                    failures[index] = exc
                    tg.cancel_scope.cancel()

            for index, server in enumerate(servers):
                tg.start_soon(_update, index, server)

        exc = next((failure for failure in failures if failure is not None), None)
        if exc is None:
            return None
        self._logger.warning("Configuration update for section %s failed: %s", params.section, exc)
        if isinstance(exc, ResponseError):
            raise exc
        raise as_response_error(exc) from exc

    async def handle_request(self, method: str, params: Any, token: CancellationToken = NONE) -> Any:
        """Route a vendor request to the first server that registered a handler for it."""
        for server in self._servers:
            if server.handles_request(method):
                outcome = await self._delegate(server.try_handle_request(method, params, token))
                return outcome.value
        raise ResponseError(jsonrpc.METHOD_NOT_FOUND, f"Unhandled method {method}")

    async def on_notification_followup(self, params: NotificationFollowupParams) -> None:
        try:
            envelope = NotificationEnvelope.decode(params.source.id)
        except InvalidEnvelopeError:
            self._logger.warning("Dropping notification followup with undecodable id %r", params.source.id)
            return

        for server in self._servers:
            if server.name == envelope.serverName:
                try:
                    await server.send_notification_followup(params, envelope)
                except Exception:
                    self._logger.exception("Notification followup failed for server %s", envelope.serverName)
                return
        self._logger.warning("Dropping notification followup for unknown server %s", envelope.serverName)

    # ------------------------------------------------------------------
    # Broadcast notifications
    # ------------------------------------------------------------------

    async def on_initialized(self, params: InitializedParams) -> None:
        await self._broadcast("initialized", lambda server: server.send_initialized_notification(params))

    async def did_change_configuration(self, params: DidChangeConfigurationParams) -> None:
        await self._broadcast(
            "didChangeConfiguration", lambda server: server.send_did_change_configuration_notification(params)
        )

    async def on_credentials_deletion(self, credentials_type: CredentialsType) -> None:
        await self._broadcast("credentialsDelete", lambda server: server.notify_credentials_deletion(credentials_type))

    async def did_change_workspace_folders(self, params: DidChangeWorkspaceFoldersParams) -> None:
        self._workspace_folders.apply(params.event)
        await self._broadcast(
            "didChangeWorkspaceFolders",
            lambda server: server.send_did_change_workspace_folders_notification(params),
        )

    async def did_create_files(self, params: CreateFilesParams) -> None:
        await self._broadcast("didCreateFiles", lambda server: server.send_did_create_files_notification(params))

    async def did_delete_files(self, params: DeleteFilesParams) -> None:
        await self._broadcast("didDeleteFiles", lambda server: server.send_did_delete_files_notification(params))

    async def did_rename_files(self, params: RenameFilesParams) -> None:
        await self._broadcast("didRenameFiles", lambda server: server.send_did_rename_files_notification(params))

    async def did_save_text_document(self, params: DidSaveTextDocumentParams) -> None:
        await self._broadcast(
            "didSaveTextDocument", lambda server: server.send_did_save_text_document_notification(params)
        )

    async def _broadcast(self, verb: str, deliver: Callable[[LspServer], Awaitable[None]]) -> None:
        async def _deliver(server: LspServer) -> None:
            try:
                await deliver(server)
            except Exception:
                self._logger.exception("%s handler failed for server %s", verb, server.name)

        async with anyio.create_task_group() as tg:
            for server in tuple(self._servers):
                tg.start_soon(_deliver, server)

    async def _delegate(self, call: Awaitable[DispatchResult]) -> DispatchResult:
        try:
            return await call
        except ResponseError:
            raise
        except Exception as exc:
            raise as_response_error(exc) from exc

    # ------------------------------------------------------------------
    # Connection binding
    # ------------------------------------------------------------------

    def _bind(self, connection: Connection) -> None:
        connection.on_request(Methods.INITIALIZE, self._on_initialize)
        connection.on_notification(Methods.INITIALIZED, self._on_initialized)
        connection.on_request(Methods.EXECUTE_COMMAND, self._on_execute_command)
        connection.on_notification(Methods.DID_CHANGE_CONFIGURATION, self._on_did_change_configuration)
        connection.on_notification(Methods.DID_CHANGE_WORKSPACE_FOLDERS, self._on_did_change_workspace_folders)
        connection.on_notification(Methods.DID_CREATE_FILES, self._on_did_create_files)
        connection.on_notification(Methods.DID_DELETE_FILES, self._on_did_delete_files)
        connection.on_notification(Methods.DID_RENAME_FILES, self._on_did_rename_files)
        connection.on_notification(Methods.DID_SAVE_TEXT_DOCUMENT, self._on_did_save_text_document)
        connection.on_request(Methods.GET_CONFIGURATION_FROM_SERVER, self._on_get_configuration_from_server)
        connection.on_request(Methods.UPDATE_CONFIGURATION, self._on_update_configuration)
        connection.on_notification(Methods.BEARER_CREDENTIALS_DELETE, partial(self._on_credentials_delete, "bearer"))
        connection.on_notification(Methods.IAM_CREDENTIALS_DELETE, partial(self._on_credentials_delete, "iam"))
        connection.on_request(Methods.NOTIFICATION_FOLLOWUP, self._on_notification_followup)
        for method in identity.REQUEST_METHODS:
            connection.on_request(method, partial(self._on_vendor_request, method))

    async def _on_initialize(self, raw: Any, token: CancellationToken | None = None) -> dict[str, Any]:
        return await self.initialize(_parse(InitializeParams, raw), token or NONE)

    async def _on_initialized(self, raw: Any) -> None:
        await self.on_initialized(_parse(InitializedParams, raw))

    async def _on_execute_command(self, raw: Any, token: CancellationToken | None = None) -> Any:
        return (await self.execute_command(_parse(ExecuteCommandParams, raw), token or NONE)).value

    async def _on_did_change_configuration(self, raw: Any) -> None:
        await self.did_change_configuration(_parse(DidChangeConfigurationParams, raw))

    async def _on_did_change_workspace_folders(self, raw: Any) -> None:
        await self.did_change_workspace_folders(_parse(DidChangeWorkspaceFoldersParams, raw))

    async def _on_did_create_files(self, raw: Any) -> None:
        await self.did_create_files(_parse(CreateFilesParams, raw))

    async def _on_did_delete_files(self, raw: Any) -> None:
        await self.did_delete_files(_parse(DeleteFilesParams, raw))

    async def _on_did_rename_files(self, raw: Any) -> None:
        await self.did_rename_files(_parse(RenameFilesParams, raw))

    async def _on_did_save_text_document(self, raw: Any) -> None:
        await self.did_save_text_document(_parse(DidSaveTextDocumentParams, raw))

    async def _on_get_configuration_from_server(self, raw: Any, token: CancellationToken | None = None) -> Any:
        params = _parse(GetConfigurationFromServerParams, raw)
        return (await self.get_configuration_from_server(params, token or NONE)).value

    async def _on_update_configuration(self, raw: Any, token: CancellationToken | None = None) -> None:
        await self.update_configuration(_parse(UpdateConfigurationParams, raw), token or NONE)

    async def _on_credentials_delete(self, credentials_type: CredentialsType, _raw: Any = None) -> None:
        await self.on_credentials_deletion(credentials_type)

    async def _on_notification_followup(self, raw: Any, _token: CancellationToken | None = None) -> None:
        await self.on_notification_followup(_parse(NotificationFollowupParams, raw))

    async def _on_vendor_request(self, method: str, raw: Any, token: CancellationToken | None = None) -> Any:
        return await self.handle_request(method, identity.parse_request(method, raw), token or NONE)


def _parse(model: type[ModelT], raw: Any) -> ModelT:
    try:
        return model.model_validate(raw if raw is not None else {})
    except ValidationError as exc:
        raise ResponseError(jsonrpc.INVALID_PARAMS, f"Invalid {model.__name__}", exc.errors(include_url=False)) from exc


def _duplicate_names(names: Iterable[str | None]) -> list[str]:
    seen: set[str] = set()
    duplicates: dict[str, None] = {}
    for name in names:
        if not name:
            continue
        if name in seen:
            duplicates.setdefault(name, None)
        seen.add(name)
    return list(duplicates)


__all__ = ["LspRouter", "SERVER_CAPABILITIES_CONFIGURATION_SECTION"]
