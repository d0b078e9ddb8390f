"""
JSON extraction utilities for parsing model responses.

Model output is untrusted. Only one heuristic is applied: prefer the first
fenced code block, then take everything from the first ``{`` to the last
``}``. Nothing is repaired; anything else raises.
"""
import json
import re
from typing import Any, Dict, Optional

from oracle_relayer.exceptions import JsonNotFoundError, JsonParseError
from oracle_relayer.utils.logger import logger

# ```json ... ``` or ``` ... ```, first match only
CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def extract_json_block(text: str) -> Optional[str]:
    """
    Locate the JSON object span in model text.

    Args:
        text: Raw model response

    Returns:
        The substring from the first ``{`` to the last ``}`` inclusive, or
        None if there is no such span
    """
    if not text or not isinstance(text, str):
        return None

    fence = CODE_BLOCK_PATTERN.search(text)
    body = fence.group(1) if fence else text

    start = body.find("{")
    end = body.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    return body[start:end + 1]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def parse_json_block(text: str) -> Dict[str, Any]:
    """
    Extract and parse the JSON object in a model response.

    Raises:
        JsonNotFoundError: No ``{ ... }`` span in the text
        JsonParseError: The span is not valid JSON or not an object
    """
    block = extract_json_block(text)
    if block is None:
        logger.warning("[Parser] No JSON object found in text: %s",
                       text[:100] + "..." if text and len(text) > 100 else text)
        raise JsonNotFoundError()

    try:
        parsed = json.loads(block, parse_constant=_reject_constant)
    except (json.JSONDecodeError, ValueError) as e:
        logger.warning("[Parser] JSON parsing failed: %s", str(e))
        raise JsonParseError() from e

    if not isinstance(parsed, dict):
        raise JsonParseError()
    return parsed
