import json
from typing import Any

from .result import Error, Ok, Result


def parse_json_safely(json_str: str) -> Result[dict[str, Any], str]:
    """
    Parse a JSON object, returning Result instead of raising.

    Args:
        json_str: Raw text frame

    Returns:
        Ok(dict) if the text is a JSON object, Error(str) otherwise
    """
    try:  # nosemgrep: forbid-try-except
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        return Error(f"JSON decode error: {e!s}")
    if not isinstance(parsed, dict):
        return Error(f"Expected a JSON object, got {type(parsed).__name__}")
    return Ok(parsed)
