"""Message helpers and the tool-output decoder.

Messages are plain dictionaries in the shape the agent loop already uses::

    {"role": "tool", "content": [
        {"type": "tool-result", "toolCallId": "c1", "toolName": "f1",
         "output": {"type": "json", "value": {...}}}
    ]}

Tool outputs are decoded once, here, into ``JsonOutput`` or ``TextOutput`` so
the compaction engine never has to sniff optional fields itself.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

# Type alias for message dictionaries
Message = Dict[str, Any]


@dataclass(frozen=True)
class JsonOutput:
    """A structured tool output."""

    value: Any


@dataclass(frozen=True)
class TextOutput:
    """A plain-text tool output."""

    text: str


ToolOutput = Union[JsonOutput, TextOutput]

_TEXT_TYPES = ("text", "error-text")
_JSON_TYPES = ("json", "error-json")


def decode_tool_output(raw: Any) -> Optional[ToolOutput]:
    """
    Decode a raw ``output`` field of a tool-result part.

    Args:
        raw: The value stored under the part's ``output`` key

    Returns:
        A ``JsonOutput`` or ``TextOutput``, or None when there is no output
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        return TextOutput(text=raw)

    if not isinstance(raw, dict):
        return JsonOutput(value=raw)

    output_type = raw.get("type")
    if output_type in _TEXT_TYPES:
        # AI SDK v5 uses "value" for text outputs; older producers use "text"
        text = raw.get("value")
        if not isinstance(text, str):
            text = raw.get("text")
        if isinstance(text, str):
            return TextOutput(text=text)
        return JsonOutput(value=raw)

    if output_type in _JSON_TYPES:
        return JsonOutput(value=raw.get("value"))

    return JsonOutput(value=raw)


def encode_tool_output(output: ToolOutput) -> Dict[str, Any]:
    """Render a decoded tool output back into its wire shape."""
    if isinstance(output, TextOutput):
        return {"type": "text", "value": output.text}
    if isinstance(output, JsonOutput):
        return {"type": "json", "value": output.value}
    raise TypeError(f"Unsupported tool output: {output!r}")


def unwrap_tool_output(output: ToolOutput) -> Any:
    """Return the plain value carried by a decoded tool output."""
    if isinstance(output, TextOutput):
        return output.text
    if isinstance(output, JsonOutput):
        return output.value
    raise TypeError(f"Unsupported tool output: {output!r}")


def message_has_text_content(message: Optional[Message]) -> bool:
    """
    Determine whether a message carries non-empty text (string or text parts).
    Used to detect conversational boundaries for compaction.
    """
    if not message:
        return False

    content = message.get("content")

    if isinstance(content, str):
        return content != ""

    if isinstance(content, list):
        return any(
            part.get("type") == "text" and isinstance(part.get("text"), str) and part["text"] != ""
            for part in content
            if isinstance(part, dict)
        )

    return False


def is_tool_message(message: Optional[Message]) -> bool:
    """Check if a message is a tool message with a content list."""
    return bool(message) and message.get("role") == "tool" and isinstance(
        message.get("content"), list
    )


def is_tool_result_part(part: Any) -> bool:
    return isinstance(part, dict) and part.get("type") == "tool-result"


def ends_with_assistant_text(messages: List[Message]) -> bool:
    """
    Check the compaction entry guard: the final message must be an assistant
    message carrying text, i.e. a completed assistant turn. String content
    counts even when empty.
    """
    if not messages:
        return False
    last = messages[-1]
    if not last or last.get("role") != "assistant":
        return False
    return isinstance(last.get("content"), str) or message_has_text_content(last)
