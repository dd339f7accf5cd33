# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Protocol payloads handled by the router.

Field names follow the wire (camelCase), the same convention as the generated
models in ``mcp.types``. Models allow extra fields so vendor extensions pass
through untouched to the feature servers.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class TextDocumentSyncKind(IntEnum):
    NONE = 0
    FULL = 1
    INCREMENTAL = 2


class MessageType(IntEnum):
    ERROR = 1
    WARNING = 2
    INFO = 3
    LOG = 4


CredentialsType = Literal["bearer", "iam"]


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------


class WorkspaceFolder(_Payload):
    name: str
    uri: str


class ClientInfo(_Payload):
    name: str
    version: str | None = None


class WindowCapabilities(_Payload):
    notifications: bool | None = None


class AwsClientCapabilities(_Payload):
    window: WindowCapabilities | None = None


class AwsInitializationOptions(_Payload):
    """Vendor block sent by the client under ``initializationOptions.aws``."""

    clientInfo: dict[str, Any] | None = None
    awsClientCapabilities: AwsClientCapabilities | None = None


class InitializationOptions(_Payload):
    aws: AwsInitializationOptions | None = None


class InitializeParams(_Payload):
    processId: int | None = None
    clientInfo: ClientInfo | None = None
    rootPath: str | None = None
    rootUri: str | None = None
    capabilities: dict[str, Any] = Field(default_factory=dict)
    initializationOptions: InitializationOptions | None = None
    workspaceFolders: list[WorkspaceFolder] | None = None

    @property
    def aws(self) -> AwsInitializationOptions | None:
        return self.initializationOptions.aws if self.initializationOptions else None

    @property
    def client_supports_notifications(self) -> bool:
        aws = self.aws
        if aws is None or aws.awsClientCapabilities is None or aws.awsClientCapabilities.window is None:
            return False
        return bool(aws.awsClientCapabilities.window.notifications)


class InitializedParams(_Payload):
    pass


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class ExecuteCommandParams(_Payload):
    command: str
    arguments: list[Any] | None = None


class DidChangeConfigurationParams(_Payload):
    settings: Any = None


class GetConfigurationFromServerParams(_Payload):
    section: str


class UpdateConfigurationParams(_Payload):
    section: str
    settings: Any = None


class WorkspaceFoldersChangeEvent(_Payload):
    added: list[WorkspaceFolder] = Field(default_factory=list)
    removed: list[WorkspaceFolder] = Field(default_factory=list)


class DidChangeWorkspaceFoldersParams(_Payload):
    event: WorkspaceFoldersChangeEvent


class FileCreate(_Payload):
    uri: str


class FileDelete(_Payload):
    uri: str


class FileRename(_Payload):
    oldUri: str
    newUri: str


class CreateFilesParams(_Payload):
    files: list[FileCreate]


class DeleteFilesParams(_Payload):
    files: list[FileDelete]


class RenameFilesParams(_Payload):
    files: list[FileRename]


class TextDocumentIdentifier(_Payload):
    uri: str


class DidSaveTextDocumentParams(_Payload):
    textDocument: TextDocumentIdentifier
    text: str | None = None


# ---------------------------------------------------------------------------
# Window notifications
# ---------------------------------------------------------------------------


class NotificationContent(_Payload):
    text: str
    title: str | None = None


class NotificationAction(_Payload):
    text: str
    type: str


class NotificationParams(_Payload):
    id: str | None = None
    type: MessageType
    content: NotificationContent
    actions: list[NotificationAction] | None = None


class NotificationSource(_Payload):
    id: str


class NotificationFollowupParams(_Payload):
    source: NotificationSource
    action: str


class ProgressParams(_Payload):
    token: str | int
    value: Any


__all__ = [
    "AwsClientCapabilities",
    "AwsInitializationOptions",
    "ClientInfo",
    "CreateFilesParams",
    "CredentialsType",
    "DeleteFilesParams",
    "DidChangeConfigurationParams",
    "DidChangeWorkspaceFoldersParams",
    "DidSaveTextDocumentParams",
    "ExecuteCommandParams",
    "FileCreate",
    "FileDelete",
    "FileRename",
    "GetConfigurationFromServerParams",
    "InitializationOptions",
    "InitializeParams",
    "InitializedParams",
    "MessageType",
    "NotificationAction",
    "NotificationContent",
    "NotificationFollowupParams",
    "NotificationParams",
    "NotificationSource",
    "ProgressParams",
    "RenameFilesParams",
    "TextDocumentIdentifier",
    "TextDocumentSyncKind",
    "UpdateConfigurationParams",
    "WindowCapabilities",
    "WorkspaceFolder",
    "WorkspaceFoldersChangeEvent",
]
