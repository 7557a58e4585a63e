"""
Request models for the messages endpoint.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from relay_service.core.errors import MalformedRequestError
from relay_service.core.logging import logger
from relay_service.core.types import (
    MessageContent,
    OpaqueContent,
    OpaquePart,
    PartsContent,
    TextContent,
    TextPart,
)


def resolve_content(raw: Any) -> MessageContent:
    """Turn raw message content into one of the content variants.

    A string is text, a list is a sequence of parts, anything else is kept as
    an opaque document. Inside a list only mappings are parts; a mapping with
    `type == "text"` is a text part, every other mapping is opaque.
    """
    if isinstance(raw, str):
        return TextContent(raw)
    if isinstance(raw, list):
        parts = []
        for element in raw:
            if not isinstance(element, dict):
                logger.debug(f"Dropping non-object content part: {element!r}")
                continue
            if element.get("type") == "text":
                text = element.get("text")
                parts.append(TextPart(text if isinstance(text, str) else ""))
            else:
                parts.append(OpaquePart(element))
        return PartsContent(tuple(parts))
    return OpaqueContent(raw)


class SystemBlock(BaseModel):
    type: str = "text"
    text: str = ""


class ToolDefinition(BaseModel):
    name: str = Field(..., description="Tool name, unique within a request.")
    description: str = ""
    input_schema: Dict[str, Any] = Field(default_factory=dict)


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: Any = None

    _body: MessageContent = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:
        self._body = resolve_content(self.content)

    @property
    def body(self) -> MessageContent:
        return self._body


class ChatRequest(BaseModel):
    """Chat request as sent by the client. Unknown fields are ignored."""
    model_config = ConfigDict(extra="ignore")

    model: str = Field(..., description="Model identifier forwarded to the backend.")
    max_tokens: Optional[int] = None
    messages: List[Message] = Field(default_factory=list)
    system: List[SystemBlock] = Field(default_factory=list)
    stop_sequences: Optional[Any] = None
    stream: Optional[bool] = None
    temperature: Optional[float] = None
    top_p: Optional[Any] = None
    top_k: Optional[Any] = None
    metadata: Optional[Dict[str, Any]] = None
    tools: List[ToolDefinition] = Field(default_factory=list)
    tool_choice: Optional[Any] = None
    thinking: Optional[Any] = None

    @field_validator("system", mode="before")
    @classmethod
    def _system_from_string(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [{"type": "text", "text": value}]
        return value

    @field_validator("messages", "tools", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


def parse_request(raw: Union[str, bytes]) -> ChatRequest:
    """Parse a JSON request body. Raises MalformedRequestError."""
    try:
        return ChatRequest.model_validate_json(raw)
    except ValidationError as e:
        raise MalformedRequestError(str(e)) from e
