from typing import Any, Dict, Optional, Sequence, Type
import logging
import re

from pydantic import BaseModel, ValidationError

from . import repair
from .models import ExtractionResult, Invalid, Ok, PointOfInterest, StructuredReply, Waypoint


WAYPOINTS_ERROR = "Failed to parse waypoints from AI response or data was invalid."
POIS_ERROR = "Failed to parse points of interest from AI response or data was invalid."

_START_DATE = re.compile(r"START_DATE:\s*(\d{4}-\d{2}-\d{2})")
_WAYPOINTS_LABEL = re.compile(r"WAYPOINTS:\s*(?=\[)")
_POIS_LABEL = re.compile(r"POIS:\s*(?=\[)")

_WAYPOINT_KEYS = ("name", "lat", "lng")
_POI_KEYS = ("name", "address", "lat", "lng")


def extract_start_date(text: str) -> Optional[str]:
    m = _START_DATE.search(text or "")
    return m.group(1) if m else None


def _matching_bracket(text: str, start: int) -> int:
    """Index of the ``]`` closing the array opened at ``start``, or -1."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
        elif ch in "]}":
            depth -= 1
            if depth == 0:
                return i if ch == "]" else -1
    return -1


def _labeled_array(text: str, label: "re.Pattern[str]") -> Optional[str]:
    m = label.search(text or "")
    if not m:
        return None
    start = m.end()
    end = _matching_bracket(text, start)
    if end == -1:
        # Unbalanced: widen to the last closing bracket in the text
        end = text.rfind("]")
        if end <= start:
            return None
    return text[start : end + 1]


def _validate(parsed: Any, model: Type[BaseModel], keys: Sequence[str], reason: str) -> ExtractionResult:
    if not isinstance(parsed, list):
        logging.error("Expected a JSON array, got %r", type(parsed).__name__)
        return Invalid(reason)
    records = []
    for item in parsed:
        if not isinstance(item, dict) or any(k not in item for k in keys):
            logging.error("Record has the wrong shape: %r", item)
            return Invalid(reason)
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            logging.error("Record failed validation: %s", e)
            return Invalid(reason)
    return Ok(records)


def _extract(text: str, label: "re.Pattern[str]", model: Type[BaseModel], keys: Sequence[str], reason: str) -> ExtractionResult:
    region = _labeled_array(text, label)
    if region is None:
        return Ok([])
    return _validate(repair.parse(region), model, keys, reason)


def extract_waypoints(text: str) -> ExtractionResult:
    return _extract(text, _WAYPOINTS_LABEL, Waypoint, _WAYPOINT_KEYS, WAYPOINTS_ERROR)


def extract_pois(text: str) -> ExtractionResult:
    return _extract(text, _POIS_LABEL, PointOfInterest, _POI_KEYS, POIS_ERROR)


def from_text(text: str) -> StructuredReply:
    """Extract everything from a raw-text reply; the text itself is the itinerary."""
    return StructuredReply(
        itinerary=text,
        start_date=extract_start_date(text),
        waypoints=extract_waypoints(text),
        pois=extract_pois(text),
    )


def from_structured(payload: Dict[str, Any]) -> StructuredReply:
    """Validate the fields of a structured reply; no text extraction involved."""
    start_date = payload.get("startDate") or None
    return StructuredReply(
        itinerary=str(payload.get("itinerary") or ""),
        start_date=str(start_date) if start_date else None,
        waypoints=_validate(payload.get("waypoints") or [], Waypoint, _WAYPOINT_KEYS, WAYPOINTS_ERROR),
        pois=_validate(payload.get("pois") or [], PointOfInterest, _POI_KEYS, POIS_ERROR),
    )
