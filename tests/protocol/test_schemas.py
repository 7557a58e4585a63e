import pytest
from pydantic import ValidationError

from relay_service.core.errors import MalformedRequestError
from relay_service.core.types import OpaqueContent, OpaquePart, PartsContent, TextContent, TextPart
from relay_service.protocol.schemas import ChatRequest, parse_request, resolve_content


class TestResolveContent:
    def test_string_is_text(self):
        assert resolve_content("hello") == TextContent("hello")

    def test_list_is_parts(self):
        image = {"type": "image", "source": {"data": "AA"}}
        content = resolve_content([{"type": "text", "text": "a"}, image])
        assert content == PartsContent((TextPart("a"), OpaquePart(image)))

    def test_part_without_type_is_opaque(self):
        assert resolve_content([{"text": "a"}]) == PartsContent((OpaquePart({"text": "a"}),))

    def test_non_string_text_becomes_empty(self):
        assert resolve_content([{"type": "text", "text": 3}]) == PartsContent((TextPart(""),))

    def test_non_mapping_elements_are_dropped(self):
        assert resolve_content(["loose", 1, {"type": "text", "text": "kept"}]) == PartsContent((TextPart("kept"),))

    @pytest.mark.parametrize("raw", [{"a": 1}, 42, None, True])
    def test_anything_else_is_opaque(self, raw):
        assert resolve_content(raw) == OpaqueContent(raw)


class TestChatRequest:
    def test_minimal(self):
        req = ChatRequest.model_validate({"model": "x", "messages": [{"role": "user", "content": "say hi"}]})
        assert req.model == "x"
        assert req.messages[0].body == TextContent("say hi")
        assert req.system == []
        assert req.tools == []

    def test_body_resolved_at_parse_time(self):
        req = ChatRequest.model_validate_json(
            '{"model": "x", "messages": [{"role": "assistant", "content": [{"type": "text", "text": "ok"}]}]}'
        )
        assert req.messages[0].body == PartsContent((TextPart("ok"),))

    def test_unknown_fields_ignored(self):
        req = ChatRequest.model_validate({"model": "x", "messages": [], "anthropic_beta": ["x"], "service_tier": "auto"})
        assert req.model == "x"

    def test_full_client_request(self):
        req = ChatRequest.model_validate({
            "model": "claude-sonnet-4-20250514",
            "max_tokens": 32000,
            "stream": True,
            "temperature": 1,
            "metadata": {"user_id": "u1"},
            "system": [{"type": "text", "text": "You are helpful.", "cache_control": {"type": "ephemeral"}}],
            "tools": [{"name": "Read", "description": "Read a file", "input_schema": {"type": "object"}}],
            "messages": [{"role": "user", "content": "hi"}],
            "thinking": {"type": "enabled", "budget_tokens": 4000},
        })
        assert req.system[0].text == "You are helpful."
        assert req.tools[0].name == "Read"
        assert req.tool_choice is None
        assert req.stop_sequences is None

    def test_null_lists_are_empty(self):
        req = ChatRequest.model_validate({"model": "x", "messages": None, "tools": None, "system": None})
        assert (req.messages, req.tools, req.system) == ([], [], [])

    def test_model_is_required(self):
        with pytest.raises(ValidationError):
            ChatRequest.model_validate({"messages": []})

    def test_unknown_role_rejected(self):
        with pytest.raises(ValidationError):
            ChatRequest.model_validate({"model": "x", "messages": [{"role": "tool", "content": "x"}]})


class TestParseRequest:
    def test_valid_body(self):
        assert parse_request(b'{"model": "x", "messages": []}').model == "x"

    @pytest.mark.parametrize("raw", ["{not json", '{"messages": []}', "[]"])
    def test_malformed_body(self, raw):
        with pytest.raises(MalformedRequestError):
            parse_request(raw)
