# relay_service/protocol/prompts.py
"""
Flat prompt construction for completion backends that only take text.

A structured chat request is rendered as a sequence of tagged sections:
1. one <system> section per system instruction
2. a <tools> section with the tool-call contract and the offered tools
3. one section per message content unit, tagged with the message role

Tool calls are requested from the backend as inline markup,
<use tool="NAME">{json arguments}</use>, which
relay_service.protocol.parsers.use_tags reads back out of the answer.
"""
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional

from relay_service.core.errors import UnsupportedFeatureError
from relay_service.core.types import OpaqueContent, PartsContent, TextContent, TextPart
from relay_service.protocol.schemas import ChatRequest, Message, ToolDefinition

TOOLS_PLACEHOLDER = "{tools}"

DEFAULT_TOOL_CONTRACT = """USE TOOL
--------
Specify what tool to use and the required arguments in <use></use> block.
- Place tool name in "tool" attribute.
- Place tool arguments between <use> and </use>
- The tool arguments MUST be a valid JSON object that can be validated against the tool's input JSON schema.
ALWAYS check the existing facts before calling the tool, DO NOT call tools repeatedly.
Once you respond with </use>, you STOP.

<examples>
\t<good_example>
\t\t<use tool="Edit">
\t\t{
\t\t\t"file_path": "/path/to/main.py",
\t\t\t"old_string": "class Snippet:\\n    def __init__(self, file_path, line_no, lines):",
\t\t\t"new_string": "class Snippet:\\n    def __init__(self, file_path, line_no, lines, context_range=4):"
\t\t}
\t\t</use>
\t</good_example>

\t<bad_example>
\t\t<use>
\t\t{
\t\t\t"tool": "Edit",
\t\t\t"file_path": "/path/to/main.py",
\t\t\t"old_string": "class Snippet:\\n    def __init__(self, file_path, line_no, lines):",
\t\t\t"new_string": "class Snippet:\\n    def __init__(self, file_path, line_no, lines, context_range=4):"
\t\t}
\t\t</use>
\t\t<reasoning>
\t\t\tThe tool name should be placed in "tool" attribute!
\t\t</reasoning>
\t</bad_example>

\t<bad_example>
\t\t<use tool="Read">
\t\t\t<file_path>/path/to/main.go</file_path>
\t\t\t<offset>116</offset>
\t\t\t<limit>110</limit>
\t\t</use>
\t\t<reasoning>
\t\t\tThe tool arguments MUST be a valid JSON object.
\t\t</reasoning>
\t</bad_example>
</examples>

AVAILABLE TOOLS
---------------
{tools}"""


def render_section(tag: str, body: str) -> str:
    """
    Render one tagged section.

    The body is stripped of surrounding whitespace and every line is indented
    by two spaces:

      <tag>
        line 1
        line 2
      </tag>
    """
    lines = [f"<{tag}>"]
    lines.extend(f"  {line}" for line in body.strip().split("\n"))
    lines.append(f"</{tag}>")
    return "\n".join(lines) + "\n"


def _to_json(document: Any) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def prompt_for_logging(prompt: str) -> str:
    """The prompt without the (long, static) tool contract."""
    idx = prompt.find("</tools>")
    if idx == -1:
        return prompt
    return prompt[idx + len("</tools>") :]


class PromptComposer:
    """Compose a ChatRequest into a single deterministic prompt string."""

    def __init__(
        self,
        disabled_tools: Optional[Mapping[str, Any]] = None,
        tool_contract: Optional[str] = None,
    ):
        self.disabled_tools: Dict[str, bool] = {
            name: bool(flag) for name, flag in (disabled_tools or {}).items()
        }
        contract = tool_contract or DEFAULT_TOOL_CONTRACT
        if TOOLS_PLACEHOLDER not in contract:
            raise ValueError(f"tool contract must contain the {TOOLS_PLACEHOLDER} placeholder")
        self.tool_contract = contract

    @staticmethod
    def unsupported_features(request: ChatRequest) -> List[str]:
        """Names of request fields the backend cannot honor."""
        features = []
        if request.tool_choice:
            features.append("tool_choice")
        if request.stop_sequences:
            features.append("stop_sequences")
        return features

    def validate(self, request: ChatRequest) -> None:
        features = self.unsupported_features(request)
        if features:
            raise UnsupportedFeatureError(features)

    def filter_tools(self, tools: Iterable[ToolDefinition]) -> List[ToolDefinition]:
        return [tool for tool in tools if not self.disabled_tools.get(tool.name, False)]

    def render_tools(self, tools: List[ToolDefinition]) -> str:
        catalog = _to_json([tool.model_dump() for tool in tools])
        return self.tool_contract.replace(TOOLS_PLACEHOLDER, catalog)

    def render_message(self, message: Message) -> List[str]:
        """One section per content unit of the message, in source order."""
        body = message.body
        if isinstance(body, TextContent):
            return [render_section(message.role, body.text)]
        if isinstance(body, PartsContent):
            sections = []
            for part in body.parts:
                if isinstance(part, TextPart):
                    sections.append(render_section(message.role, part.text))
                else:
                    sections.append(render_section(message.role, _to_json(part.document)))
            return sections
        if isinstance(body, OpaqueContent):
            return [render_section(message.role, _to_json(body.document))]
        raise TypeError(f"unknown message content: {type(body).__name__}")

    def compose(self, request: ChatRequest) -> str:
        """
        Build the prompt for a request.

        Raises:
            UnsupportedFeatureError: the request uses tool_choice or stop_sequences
        """
        self.validate(request)

        sections: List[str] = []
        for block in request.system:
            sections.append(render_section("system", block.text))

        tools = self.filter_tools(request.tools)
        if tools:
            sections.append(render_section("tools", self.render_tools(tools)))

        for message in request.messages:
            sections.extend(self.render_message(message))

        return "".join(sections)
