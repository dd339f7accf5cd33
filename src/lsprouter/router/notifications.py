# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Correlation of window notifications and their follow-up actions.

Every feature server owns one :class:`NotificationRouter`. Outbound
notifications get an id that encodes the owning server's name and a local
sequence number; when the client later reports a follow-up action (for
example the user clicked "Acknowledge"), the router in :mod:`.lsp_router`
decodes that id, finds the owning server by name and hands the follow-up to
this server-local router.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from itertools import count
import logging
from typing import Any

import orjson as oj
from pydantic import BaseModel, ConfigDict, ValidationError

from ..types import NotificationFollowupParams, NotificationParams, NotificationSource
from ..utils import get_logger, maybe_await_with_args

FollowupHandler = Callable[[NotificationFollowupParams], Any]
NotificationSender = Callable[[NotificationParams], Awaitable[None]]


class InvalidEnvelopeError(ValueError):
    """Raised when a follow-up carries an id that is not one of our envelopes."""


class NotificationEnvelope(BaseModel):
    """Structured correlation key carried in ``NotificationParams.id``."""

    model_config = ConfigDict(frozen=True)

    serverName: str
    id: str

    def encode(self) -> str:
        return oj.dumps({"serverName": self.serverName, "id": self.id}).decode()

    @classmethod
    def decode(cls, raw: str) -> "NotificationEnvelope":
        try:
            return cls.model_validate(oj.loads(raw))
        except (oj.JSONDecodeError, ValidationError) as exc:
            raise InvalidEnvelopeError(f"Not a notification envelope: {raw!r}") from exc


class NotificationRouter:
    """Allocates envelopes for one server and holds its follow-up handler."""

    def __init__(self, server_name: str, sender: NotificationSender, *, logger: logging.Logger | None = None) -> None:
        if not server_name:
            raise ValueError("server_name must be non-empty")
        self._server_name = server_name
        self._sender = sender
        self._sequence = count(1)
        self._followup_handler: FollowupHandler | None = None
        self._logger = logger or get_logger("lsprouter.notifications")

    @property
    def server_name(self) -> str:
        return self._server_name

    async def send(self, params: NotificationParams) -> NotificationEnvelope:
        envelope = NotificationEnvelope(serverName=self._server_name, id=str(next(self._sequence)))
        await self._sender(params.model_copy(update={"id": envelope.encode()}))
        return envelope

    def on_followup(self, handler: FollowupHandler | None) -> FollowupHandler | None:
        """Install the single active follow-up handler and return the one it replaces."""
        previous = self._followup_handler
        if previous is not None and previous is not handler:
            self._logger.debug("Replacing notification followup handler for server %s", self._server_name)
        self._followup_handler = handler
        return previous

    async def process_followup(
        self, params: NotificationFollowupParams, envelope: NotificationEnvelope | None = None
    ) -> None:
        """Hand *params* to the installed handler.

        When the decoded *envelope* is supplied the handler sees the local
        sequence id it got back from :meth:`send` instead of the wire id.
        """
        handler = self._followup_handler
        if handler is None:
            self._logger.debug("No followup handler installed for server %s", self._server_name)
            return
        if envelope is not None:
            params = params.model_copy(update={"source": NotificationSource(id=envelope.id)})
        await maybe_await_with_args(handler, params)


__all__ = ["InvalidEnvelopeError", "NotificationEnvelope", "NotificationRouter"]
