# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Routing layer.

:mod:`.lsp_router` holds the coordinator bound to the client connection,
:mod:`.server` the per-feature facades it multiplexes over.
"""

from __future__ import annotations

from .lsp_router import SERVER_CAPABILITIES_CONFIGURATION_SECTION, LspRouter
from .merge import merge_initialize_results, merge_lists
from .notifications import NotificationEnvelope, NotificationRouter
from .server import LspServer, ServerNotifications
from .slots import UNHANDLED, DispatchResult, HandlerSlot
from .workspace import WorkspaceFolderSet


__all__ = [
    "LspRouter",
    "LspServer",
    "ServerNotifications",
    "NotificationEnvelope",
    "NotificationRouter",
    "DispatchResult",
    "HandlerSlot",
    "UNHANDLED",
    "WorkspaceFolderSet",
    "merge_initialize_results",
    "merge_lists",
    "SERVER_CAPABILITIES_CONFIGURATION_SECTION",
]
