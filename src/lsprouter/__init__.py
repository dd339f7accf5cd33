# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Language-server runtime core: one client connection, many feature servers."""

from __future__ import annotations

from . import identity, types
from .cancellation import CancellationToken, CancellationTokenSource
from .config import RuntimeConfig
from .connection import Connection, Methods
from .errors import AwsErrorCodes, AwsResponseError, LspErrorCodes, ResponseError
from .router import DispatchResult, LspRouter, LspServer, NotificationEnvelope, merge_initialize_results


__all__ = [
    "LspRouter",
    "LspServer",
    "RuntimeConfig",
    "Connection",
    "Methods",
    "CancellationToken",
    "CancellationTokenSource",
    "DispatchResult",
    "NotificationEnvelope",
    "merge_initialize_results",
    "ResponseError",
    "AwsResponseError",
    "AwsErrorCodes",
    "LspErrorCodes",
    "identity",
    "types",
]
