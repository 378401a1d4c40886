"""
Decoding of LLM responses that are supposed to be JSON.
"""

import json
import re
from typing import Any

from .error_handler import MalformedPayloadError

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def response_text(response: Any) -> str:
    """Return the text of a LangChain message, a plain string, or ''."""
    if response is None:
        return ""
    if isinstance(response, str):
        return response
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Multi-part content (e.g. Gemini) -> concatenate the text parts
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip())


def decode_json(text: str) -> Any:
    """Parse a JSON payload, tolerating a Markdown code-fence wrapper."""
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise MalformedPayloadError("Empty response from AI service")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(f"Response is not valid JSON: {e}") from e
