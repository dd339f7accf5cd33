"""Workspace folders tracked by the router across the session.

Folders are identified by URI with any trailing ``/`` stripped, so
``file:///repo`` and ``file:///repo/`` name the same folder.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from urllib.parse import unquote, urlparse

from ..types import InitializeParams, WorkspaceFolder, WorkspaceFoldersChangeEvent


def normalize_uri(uri: str) -> str:
    return uri.rstrip("/")


def _folder_name(uri: str) -> str:
    path = unquote(urlparse(uri).path).rstrip("/")
    return path.rsplit("/", 1)[-1] or uri


class WorkspaceFolderSet:
    """Ordered folders, unique by normalized URI."""

    def __init__(self, folders: Iterable[WorkspaceFolder] = ()) -> None:
        self._folders: list[WorkspaceFolder] = []
        self._add(folders)

    @classmethod
    def from_initialize_params(cls, params: InitializeParams) -> "WorkspaceFolderSet":
        if params.workspaceFolders:
            return cls(params.workspaceFolders)
        if params.rootUri:
            return cls([WorkspaceFolder(name=_folder_name(params.rootUri), uri=params.rootUri)])
        return cls()

    def apply(self, event: WorkspaceFoldersChangeEvent) -> None:
        """Apply removals first, then append additions not already present."""
        removed = {normalize_uri(folder.uri) for folder in event.removed}
        self._folders = [folder for folder in self._folders if normalize_uri(folder.uri) not in removed]
        self._add(event.added)

    def _add(self, folders: Iterable[WorkspaceFolder]) -> None:
        known = {normalize_uri(folder.uri) for folder in self._folders}
        for folder in folders:
            key = normalize_uri(folder.uri)
            if key in known:
                continue
            known.add(key)
            self._folders.append(folder)

    def as_list(self) -> list[WorkspaceFolder]:
        return list(self._folders)

    def __iter__(self) -> Iterator[WorkspaceFolder]:
        return iter(tuple(self._folders))

    def __len__(self) -> int:
        return len(self._folders)

    def __bool__(self) -> bool:
        return bool(self._folders)


__all__ = ["WorkspaceFolderSet", "normalize_uri"]
