"""
Unit tests for the messaging relay.
Tests linear backoff, retry exhaustion, and photo/text dispatch.

The Telegram client is an AsyncMock; delays are recorded by a fake sleep
so nothing waits in real time.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.errors import DeliveryError
from app.models.verification import PhotoMessage, TextMessage
from app.services.relay import MessageRelay


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def _mock_client():
    client = MagicMock()
    client.send_message = AsyncMock(return_value={"message_id": 1})
    client.send_photo = AsyncMock(return_value={"message_id": 2})
    return client


class TestRelaySend:
    """Test MessageRelay.send retry behaviour."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt_does_not_wait(self):
        client = _mock_client()
        sleep = RecordingSleep()
        relay = MessageRelay(client, "chat-1", sleep=sleep)

        result = await relay.send(TextMessage(content="hello"))

        assert result == {"message_id": 1}
        client.send_message.assert_awaited_once_with("chat-1", "hello", parse_mode=None)
        assert sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [1, 2])
    async def test_recovers_after_k_failures_with_linear_backoff(self, failures):
        """k failures then success: k+1 calls, waits of 1s, 2s, ... k s."""
        client = _mock_client()
        client.send_message.side_effect = (
            [ConnectionError(f"boom {i}") for i in range(failures)] + [{"message_id": 9}]
        )
        sleep = RecordingSleep()
        relay = MessageRelay(client, "chat-1", sleep=sleep)

        result = await relay.send(TextMessage(content="hello"))

        assert result == {"message_id": 9}
        assert client.send_message.await_count == failures + 1
        assert sleep.delays == [1.0 * (i + 1) for i in range(failures)]
        assert sum(sleep.delays) >= sum(range(1, failures + 1))

    @pytest.mark.asyncio
    async def test_always_failing_raises_after_three_attempts(self):
        """Exhausted retries raise DeliveryError carrying the final error."""
        client = _mock_client()
        errors = [ConnectionError("first"), ConnectionError("second"), ConnectionError("last")]
        client.send_message.side_effect = errors
        sleep = RecordingSleep()
        relay = MessageRelay(client, "chat-1", sleep=sleep)

        with pytest.raises(DeliveryError) as exc_info:
            await relay.send(TextMessage(content="hello"))

        assert client.send_message.await_count == 3
        assert exc_info.value.last_error is errors[-1]
        assert exc_info.value.__cause__ is errors[-1]
        assert exc_info.value.attempts == 3
        assert "last" in str(exc_info.value)
        # No wait after the final attempt
        assert sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_single_attempt_relay_does_not_retry(self):
        """retries=1 is the no-retry mode used when retry_on_send is off."""
        client = _mock_client()
        client.send_message.side_effect = ConnectionError("down")
        sleep = RecordingSleep()
        relay = MessageRelay(client, "chat-1", retries=1, sleep=sleep)

        with pytest.raises(DeliveryError):
            await relay.send_text("hello")

        assert client.send_message.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_custom_backoff_unit(self):
        client = _mock_client()
        client.send_message.side_effect = [RuntimeError("x"), RuntimeError("y"), {"ok": True}]
        sleep = RecordingSleep()
        relay = MessageRelay(client, "chat-1", retries=3, backoff_seconds=0.5, sleep=sleep)

        await relay.send_text("hello")

        assert sleep.delays == [0.5, 1.0]

    def test_zero_retries_rejected(self):
        with pytest.raises(ValueError):
            MessageRelay(_mock_client(), "chat-1", retries=0)


class TestRelayDispatch:
    """Test that message kinds reach the right client method."""

    @pytest.mark.asyncio
    async def test_photo_message_uses_send_photo_with_caption(self):
        client = _mock_client()
        relay = MessageRelay(client, "chat-1", sleep=RecordingSleep())

        await relay.send(PhotoMessage(binary_content=b"jpeg", caption="Front Image 1/1"))

        client.send_photo.assert_awaited_once_with("chat-1", b"jpeg", caption="Front Image 1/1")
        client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_text_passes_parse_mode(self):
        client = _mock_client()
        relay = MessageRelay(client, "chat-1", sleep=RecordingSleep())

        await relay.send_text("<b>hi</b>", parse_mode="HTML")

        client.send_message.assert_awaited_once_with("chat-1", "<b>hi</b>", parse_mode="HTML")

    @pytest.mark.asyncio
    async def test_send_once_propagates_errors_unwrapped(self):
        client = _mock_client()
        client.send_message.side_effect = ConnectionError("down")
        relay = MessageRelay(client, "chat-1", sleep=RecordingSleep())

        with pytest.raises(ConnectionError):
            await relay.send_once(TextMessage(content="hello"))

        assert client.send_message.await_count == 1
