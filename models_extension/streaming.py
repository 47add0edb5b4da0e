"""Server-sent-event relay from the backend completion stream to the caller."""

import json
import logging
import time
from collections import deque
from collections.abc import Iterable, Iterator, Mapping
from contextlib import closing
from typing import Any

from openai import OpenAIError
from pydantic import BaseModel

from models_extension.constants import ACK_FRAME, DONE_FRAME
from models_extension.errors import ChannelClosedError, StreamError
from models_extension.schemas import CompletionPlan

logger = logging.getLogger(__name__)


def encode_event(chunk: BaseModel | Mapping[str, Any]) -> bytes:
    """Encode one upstream chunk as a complete `data: <json>` SSE frame."""
    if isinstance(chunk, BaseModel):
        payload = chunk.model_dump(mode="json", exclude_unset=True, by_alias=True)
    else:
        payload = dict(chunk)
    return b"data: " + json.dumps(payload, separators=(",", ":")).encode("utf-8") + b"\n\n"


class ResponseChannel:
    """Outbound half of a request: acknowledgement, ordered frames, close.

    Frames are queued by the writer and handed to the HTTP layer through
    `drain()`, which yields them in write order. Each frame is a complete
    SSE event, so a reader never observes a partial frame.
    """

    def __init__(self) -> None:
        self._pending: deque[bytes] = deque()
        self._acknowledged = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def acknowledge(self) -> None:
        if self._acknowledged:
            return
        self.write_chunk(ACK_FRAME)
        self._acknowledged = True

    def write_chunk(self, data: bytes) -> None:
        if self._closed:
            raise ChannelClosedError("Cannot write to a closed response channel")
        self._pending.append(data)

    def close(self) -> None:
        self._closed = True

    def drain(self) -> Iterator[bytes]:
        while self._pending:
            yield self._pending.popleft()


class CompletionStreamer:
    """Opens the single streaming completion and relays it onto the channel."""

    def __init__(self, copilot_client: Any, inference_client: Any) -> None:
        self._copilot_client = copilot_client
        self._inference_client = inference_client

    def open(self, plan: CompletionPlan) -> Iterable[Any]:
        # Capability plans target the models inference API; the fallback
        # answers through Copilot with the untouched conversation.
        client = self._copilot_client if plan.capability is None else self._inference_client
        try:
            return client.chat.completions.create(
                model=plan.model,
                messages=plan.message_params(),
                stream=True,
                stream_options={"include_usage": False},
            )
        except OpenAIError as e:
            logger.exception("Failed to open completion stream", extra={"model": plan.model})
            raise StreamError(f"Failed to open completion stream for {plan.model}") from e

    def relay(self, stream: Iterable[Any], channel: ResponseChannel) -> Iterator[bytes]:
        """Yield every queued frame, then each chunk as it arrives, then [DONE].

        The next chunk is only pulled from the backend once the previous
        frame has been handed to the caller. A failure after streaming has
        begun is logged and the channel closed without the sentinel.
        """
        start = time.time()
        chunk_count = 0
        try:
            yield from channel.drain()
            with closing(stream):  # type: ignore[type-var]
                for chunk in stream:
                    channel.write_chunk(encode_event(chunk))
                    chunk_count += 1
                    yield from channel.drain()
            channel.write_chunk(DONE_FRAME)
            yield from channel.drain()
        except Exception:
            logger.exception(
                "Completion stream failed mid-stream",
                extra={"forwarded_chunks": chunk_count},
            )
        finally:
            channel.close()
            logger.info(
                "Completion stream finished",
                extra={
                    "forwarded_chunks": chunk_count,
                    "streaming_duration_ms": int((time.time() - start) * 1000),
                },
            )
