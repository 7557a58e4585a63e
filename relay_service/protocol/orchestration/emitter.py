import json
import random
import string
from typing import Any, Callable, Dict, List, Optional

from relay_service.core.errors import StreamStateError, StreamWriteError
from relay_service.core.interfaces import EventSink
from relay_service.core.types import StopReason, StreamEvent, ToolInvocation

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 24
DONE = b"data: [DONE]\n\n"

# Placeholder counters; the backend does not report token usage.
DEFAULT_USAGE: Dict[str, int] = {
    "input_tokens": 89,
    "output_tokens": 11,
    "cache_read_input_tokens": 11392,
}


def random_id(prefix: str = "", length: int = ID_LENGTH) -> str:
    """`prefix` followed by `length` random lowercase letters and digits."""
    return prefix + "".join(random.choices(ID_ALPHABET, k=length))


class SseEncoder:
    """
    Encodes single protocol events as Server-Sent-Events frames:

        event: <type>
        data: {"type": "<type>", ...}

    Stateless; block indices are supplied by the caller.
    """
    def __init__(self, usage: Optional[Dict[str, int]] = None):
        self.usage = dict(usage or DEFAULT_USAGE)

    def _emit_event(self, event_type: StreamEvent, data: Dict[str, Any]) -> bytes:
        payload = {"type": str(event_type), **data}
        return f"event: {event_type}\ndata: {json.dumps(payload, ensure_ascii=False)}\n\n".encode("utf-8")

    def message_start(self, message_id: str, model: str) -> bytes:
        return self._emit_event(StreamEvent.MESSAGE_START, {
            "message": {
                "id": message_id,
                "type": "message",
                "role": "assistant",
                "model": model,
                "content": [],
                "stop_reason": None,
                "stop_sequence": None,
                "usage": {"input_tokens": 0, "output_tokens": 0},
            }
        })

    def text_block_start(self, index: int) -> bytes:
        return self._emit_event(StreamEvent.CONTENT_BLOCK_START, {
            "index": index,
            "content_block": {"type": "text", "text": ""},
        })

    def tool_block_start(self, index: int, call_id: str, name: str) -> bytes:
        return self._emit_event(StreamEvent.CONTENT_BLOCK_START, {
            "index": index,
            "content_block": {"type": "tool_use", "id": call_id, "name": name, "input": {}},
        })

    def text_delta(self, index: int, text: str) -> bytes:
        return self._emit_event(StreamEvent.CONTENT_BLOCK_DELTA, {
            "index": index,
            "delta": {"type": "text_delta", "text": text},
        })

    def input_json_delta(self, index: int, partial_json: str) -> bytes:
        return self._emit_event(StreamEvent.CONTENT_BLOCK_DELTA, {
            "index": index,
            "delta": {"type": "input_json_delta", "partial_json": partial_json},
        })

    def block_stop(self, index: int) -> bytes:
        return self._emit_event(StreamEvent.CONTENT_BLOCK_STOP, {"index": index})

    def message_delta(self, stop_reason: StopReason) -> bytes:
        return self._emit_event(StreamEvent.MESSAGE_DELTA, {
            "delta": {"stop_reason": str(stop_reason), "stop_sequence": None},
            "usage": dict(self.usage),
        })

    def message_stop(self) -> bytes:
        return self._emit_event(StreamEvent.MESSAGE_STOP, {})

    def ping(self) -> bytes:
        return self._emit_event(StreamEvent.PING, {})

    def done(self) -> bytes:
        return DONE


class ListSink(EventSink):
    """Collects written frames in memory."""
    def __init__(self):
        self.chunks: List[bytes] = []

    def write(self, data: bytes) -> None:
        self.chunks.append(data)

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


class EventStreamEmitter:
    """
    Sequences the events of one response stream onto a sink.

    Block 0 is the text block opened by start(); every tool_block() call opens
    the next index. Each frame is flushed as soon as it is written. After a
    failed write the emitter is closed and refuses further writes.
    """
    def __init__(
        self,
        sink: EventSink,
        model: str,
        encoder: Optional[SseEncoder] = None,
        id_factory: Callable[[str], str] = random_id,
    ):
        self.sink = sink
        self.model = model
        self.encoder = encoder or SseEncoder()
        self.id_factory = id_factory
        self.index = 0
        self.started = False
        self.closed = False

    def _write(self, data: bytes) -> None:
        if self.closed:
            raise StreamWriteError("stream is closed")
        try:
            self.sink.write(data)
            self.sink.flush()
        except StreamWriteError:
            self.closed = True
            raise
        except OSError as e:
            self.closed = True
            raise StreamWriteError(str(e)) from e

    def _require_started(self, operation: str) -> None:
        if not self.started:
            raise StreamStateError(f"{operation}() called before start()")

    def start(self) -> None:
        if self.started:
            raise StreamStateError("start() called twice")
        self.started = True
        self._write(self.encoder.message_start(self.id_factory("msg_"), self.model))
        self._write(self.encoder.text_block_start(self.index))
        self._write(self.encoder.ping())

    def text_delta(self, text: str) -> None:
        self._require_started("text_delta")
        self._write(self.encoder.text_delta(self.index, text))

    def finish_text_block(self) -> None:
        self._require_started("finish_text_block")
        self._write(self.encoder.block_stop(self.index))
        self._write(self.encoder.message_stop())

    def tool_block(self, invocation: ToolInvocation) -> None:
        self._require_started("tool_block")
        self.index += 1
        self._write(self.encoder.tool_block_start(self.index, self.id_factory("call_"), invocation.name))
        self._write(self.encoder.input_json_delta(self.index, invocation.arguments))
        self._write(self.encoder.block_stop(self.index))
        self._write(self.encoder.message_delta(StopReason.TOOL_USE))
        self._write(self.encoder.message_stop())

    def terminate(self) -> None:
        self._write(self.encoder.done())
