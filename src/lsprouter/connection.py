# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""The client connection seen by the router.

The transport that frames and (de)serializes JSON-RPC messages lives outside
this package. The router only needs the narrow surface described by
:class:`Connection`: registration hooks for inbound verbs plus outbound
notifications and telemetry.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Final, Mapping, Protocol, runtime_checkable

RequestHandler = Callable[[Any, Any], Awaitable[Any]]
NotificationHandler = Callable[[Any], Awaitable[None]]


@runtime_checkable
class Connection(Protocol):
    """Transport-side hooks the router binds to."""

    def on_request(self, method: str, handler: RequestHandler) -> None:  # pragma: no cover - protocol
        """Install *handler* for request *method*; it receives ``(params, token)``."""

    def on_notification(self, method: str, handler: NotificationHandler) -> None:  # pragma: no cover - protocol
        """Install *handler* for notification *method*; it receives ``params``."""

    async def send_notification(self, method: str, params: Any) -> None:  # pragma: no cover - protocol
        ...

    async def send_telemetry_event(self, event: Mapping[str, Any]) -> None:  # pragma: no cover - protocol
        ...


class Methods:
    INITIALIZE: Final[str] = "initialize"
    INITIALIZED: Final[str] = "initialized"
    EXECUTE_COMMAND: Final[str] = "workspace/executeCommand"
    DID_CHANGE_CONFIGURATION: Final[str] = "workspace/didChangeConfiguration"
    DID_CHANGE_WORKSPACE_FOLDERS: Final[str] = "workspace/didChangeWorkspaceFolders"
    DID_CREATE_FILES: Final[str] = "workspace/didCreateFiles"
    DID_DELETE_FILES: Final[str] = "workspace/didDeleteFiles"
    DID_RENAME_FILES: Final[str] = "workspace/didRenameFiles"
    DID_SAVE_TEXT_DOCUMENT: Final[str] = "textDocument/didSave"
    PROGRESS: Final[str] = "$/progress"

    GET_CONFIGURATION_FROM_SERVER: Final[str] = "aws/getConfigurationFromServer"
    UPDATE_CONFIGURATION: Final[str] = "aws/updateConfiguration"
    BEARER_CREDENTIALS_DELETE: Final[str] = "aws/credentials/token/delete"
    IAM_CREDENTIALS_DELETE: Final[str] = "aws/credentials/iam/delete"
    SHOW_NOTIFICATION: Final[str] = "aws/window/showNotification"
    NOTIFICATION_FOLLOWUP: Final[str] = "aws/window/notificationFollowup"


__all__ = ["Connection", "Methods", "NotificationHandler", "RequestHandler"]
