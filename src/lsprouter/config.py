# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Runtime configuration for the router."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
import os
from typing import Any, Final, Mapping

from .types import TextDocumentSyncKind


ENV_SERVER_NAME: Final[str] = "LSPROUTER_SERVER_NAME"
ENV_SERVER_VERSION: Final[str] = "LSPROUTER_SERVER_VERSION"

DEFAULT_SERVER_NAME: Final[str] = "AWS LSP Standalone"
DEFAULT_SERVER_VERSION: Final[str] = "1.0.0"


def _default_text_document_sync() -> dict[str, Any]:
    return {
        "openClose": True,
        "change": int(TextDocumentSyncKind.INCREMENTAL),
        "save": {"includeText": True},
    }


@dataclass(slots=True)
class RuntimeConfig:
    """Identity and defaults advertised to the client before feature servers merge in."""

    name: str = DEFAULT_SERVER_NAME
    version: str | None = DEFAULT_SERVER_VERSION
    text_document_sync: dict[str, Any] = field(default_factory=_default_text_document_sync)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RuntimeConfig":
        env = os.environ if environ is None else environ
        return cls(
            name=env.get(ENV_SERVER_NAME) or DEFAULT_SERVER_NAME,
            version=env.get(ENV_SERVER_VERSION) or DEFAULT_SERVER_VERSION,
        )

    def default_initialize_result(self) -> dict[str, Any]:
        server_info: dict[str, Any] = {"name": self.name}
        if self.version is not None:
            server_info["version"] = self.version
        return {
            "serverInfo": server_info,
            "capabilities": {"textDocumentSync": deepcopy(self.text_document_sync)},
        }


__all__ = ["RuntimeConfig", "DEFAULT_SERVER_NAME", "DEFAULT_SERVER_VERSION"]
