"""Best-effort recovery of JSON embedded in model output.

Models asked for strict JSON still produce unquoted keys, trailing commas and
trailing prose. ``parse`` is the only entry point so the textual heuristics
below can be swapped for a real lenient tokenizer without touching callers.
"""
from typing import Any, Optional
import json
import logging
import re


_BARE_KEY = re.compile(r"([{,]\s*)(\w+)\s*:")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")


def _repair(text: str) -> str:
    cleaned = _BARE_KEY.sub(r'\1"\2":', text)
    return _TRAILING_COMMA.sub(r"\1", cleaned)


def _widest_array(text: str) -> Optional[str]:
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def parse(text: str) -> Optional[Any]:
    """Return the decoded value, or None when every attempt fails."""
    if not isinstance(text, str):
        return None

    try:
        return json.loads(text)
    except (ValueError, RecursionError) as e:
        logging.warning("Initial JSON parse failed, attempting repair: %s", e)

    try:
        return json.loads(_repair(text))
    except (ValueError, RecursionError) as e:
        logging.warning("JSON parse failed after repair: %s", e)

    # The model may have added prose around the array
    candidate = _widest_array(text)
    if candidate is not None:
        try:
            return json.loads(candidate)
        except (ValueError, RecursionError) as e:
            logging.error("Parse of extracted array failed: %s", e)
    return None
