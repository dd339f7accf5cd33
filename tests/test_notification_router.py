# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

from __future__ import annotations

import pytest

from lsprouter.router.notifications import InvalidEnvelopeError, NotificationEnvelope, NotificationRouter
from lsprouter.types import MessageType, NotificationFollowupParams, NotificationParams


def _params(text: str = "hello") -> NotificationParams:
    return NotificationParams.model_validate({"type": MessageType.INFO, "content": {"text": text}})


def _followup(source_id: str, action: str = "Acknowledge") -> NotificationFollowupParams:
    return NotificationFollowupParams.model_validate({"source": {"id": source_id}, "action": action})


def test_envelope_encodes_server_name_and_local_id() -> None:
    envelope = NotificationEnvelope(serverName="Notification Server", id="1")

    assert envelope.encode() == '{"serverName":"Notification Server","id":"1"}'
    assert NotificationEnvelope.decode(envelope.encode()) == envelope


def test_envelope_decodes_client_formatted_json() -> None:
    envelope = NotificationEnvelope.decode('{"serverName":"Notification Server", "id":"1"}')

    assert envelope.serverName == "Notification Server"
    assert envelope.id == "1"


@pytest.mark.parametrize("raw", ["not json", "42", '{"id": "1"}', '{"serverName": "A"}'])
def test_envelope_rejects_foreign_ids(raw: str) -> None:
    with pytest.raises(InvalidEnvelopeError):
        NotificationEnvelope.decode(raw)


def test_router_requires_server_name() -> None:
    async def sender(_params: NotificationParams) -> None:
        return None

    with pytest.raises(ValueError):
        NotificationRouter("", sender)


@pytest.mark.anyio
async def test_send_allocates_sequential_envelopes() -> None:
    sent: list[NotificationParams] = []

    async def sender(params: NotificationParams) -> None:
        sent.append(params)

    router = NotificationRouter("Chat", sender)
    original = _params("first")

    first = await router.send(original)
    second = await router.send(_params("second"))

    assert (first.id, second.id) == ("1", "2")
    assert [NotificationEnvelope.decode(params.id or "") for params in sent] == [first, second]
    assert sent[0].content.text == "first"
    assert original.id is None


@pytest.mark.anyio
async def test_followup_handler_sees_local_id() -> None:
    async def sender(_params: NotificationParams) -> None:
        return None

    received: list[NotificationFollowupParams] = []
    router = NotificationRouter("Chat", sender)
    router.on_followup(received.append)

    envelope = await router.send(_params())
    await router.process_followup(_followup(envelope.encode()), envelope)

    assert len(received) == 1
    assert received[0].source.id == "1"
    assert received[0].action == "Acknowledge"


@pytest.mark.anyio
async def test_on_followup_replaces_and_returns_previous_handler() -> None:
    async def sender(_params: NotificationParams) -> None:
        return None

    first_calls: list[NotificationFollowupParams] = []
    second_calls: list[NotificationFollowupParams] = []

    async def second(params: NotificationFollowupParams) -> None:
        second_calls.append(params)

    router = NotificationRouter("Chat", sender)
    assert router.on_followup(first_calls.append) is None
    previous = router.on_followup(second)

    await router.process_followup(_followup("1"))

    assert previous == first_calls.append
    assert first_calls == []
    assert [params.source.id for params in second_calls] == ["1"]


@pytest.mark.anyio
async def test_followup_without_handler_is_ignored() -> None:
    async def sender(_params: NotificationParams) -> None:
        return None

    router = NotificationRouter("Chat", sender)

    await router.process_followup(_followup("1"))
