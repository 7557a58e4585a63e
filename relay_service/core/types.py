from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Dict, Tuple, Union


class StreamEvent(StrEnum):
    MESSAGE_START = "message_start"
    CONTENT_BLOCK_START = "content_block_start"
    CONTENT_BLOCK_DELTA = "content_block_delta"
    CONTENT_BLOCK_STOP = "content_block_stop"
    MESSAGE_DELTA = "message_delta"
    MESSAGE_STOP = "message_stop"
    PING = "ping"


class StopReason(StrEnum):
    END_TURN = "end_turn"
    TOOL_USE = "tool_use"


@dataclass(frozen=True)
class ToolInvocation:
    """A tool call found inline in an answer. `arguments` is opaque text."""
    name: str
    arguments: str
    position: int = 0


# Message content, resolved once when the request is parsed.

@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class OpaquePart:
    document: Dict[str, Any]


Part = Union[TextPart, OpaquePart]


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class PartsContent:
    parts: Tuple[Part, ...]


@dataclass(frozen=True)
class OpaqueContent:
    document: Any


MessageContent = Union[TextContent, PartsContent, OpaqueContent]
