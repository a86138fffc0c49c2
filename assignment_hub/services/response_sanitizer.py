# FILE: assignment_hub/services/response_sanitizer.py
"""
Recover structured content from free-form model text

Models wrap JSON in markdown fences, prepend chatter ("Sure! Here is...") or
append notes after the closing brace. sanitize_generation_response() strips
that and never raises: text that cannot be reduced to a JSON object becomes
GenerationResult.empty().
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from assignment_hub.models.assignments import GenerationResult

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```json|```", flags=re.IGNORECASE)

_EXCERPT_CHARS = 300


def _strip_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def _slice_outer_object(text: str) -> str:
    """First '{' through last '}' inclusive; unchanged text if no such pair"""
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and first < last:
        return text[first:last + 1]
    return text


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Strip fences, slice the outer braces and strictly parse.

    Returns None when the text is empty, unparseable, or not a JSON object.
    """
    if not isinstance(text, str) or not text.strip():
        return None

    candidate = _slice_outer_object(_strip_fences(text))
    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning(f"[SANITIZE] JSON parse error: {e}; text={text[:_EXCERPT_CHARS]!r}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"[SANITIZE] Expected a JSON object, got {type(data).__name__}")
        return None
    return data


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def sanitize_generation_response(text: Optional[str]) -> GenerationResult:
    """Reduce model text to a GenerationResult; total, never raises"""
    data = extract_json_object(text)
    if data is None:
        return GenerationResult.empty()

    explanation = data.get("explanation")
    result = GenerationResult(
        explanation=explanation if isinstance(explanation, str) else "",
        examples=_dict_items(data.get("examples")),
        questions=_dict_items(data.get("questions")),
    )

    logger.debug(
        f"[SANITIZE] Parsed {len(result.questions)} questions, {len(result.examples)} examples"
    )
    return result
