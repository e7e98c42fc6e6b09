from typing import Any, Dict, Optional, Protocol, Union
import json
import logging
import textwrap
import time
from datetime import datetime

import google.generativeai as genai

from .config import CONFIG
from .models import Position


INVALID_KEY_MESSAGE = "The Gemini API key is invalid. Please check your environment variable configuration."
GENERIC_FAILURE_MESSAGE = "Failed to get a response from the AI. Please try again."

ItineraryReply = Union[str, Dict[str, Any]]


class ProviderError(Exception):
    """A provider failure, already phrased for the user."""


class ItineraryProvider(Protocol):
    async def generate_itinerary(self, prompt: str, position: Position) -> ItineraryReply:
        ...


_BASE_INSTRUCTION = textwrap.dedent(
    """\
    You are the 'Taiwan Campervan AI Navigator', a specialized AI assistant for planning campervan trips in Taiwan.
    Your goal is a comprehensive, accurate and safe day-by-day itinerary.

    **Create a CONCISE and easy-to-read plan.** Users want the highlights, not a wall of text.
    The user MUST provide a start date for their trip.

    **Core Directive:** Tailor the itinerary to the user's keywords.
    - 'history' or 'culture': prioritize historical sites.
    - 'ocean', 'beaches' or 'coast': design a coastal route.
    - 'food' or 'restaurants': include stops at local markets.
    - 'mountains' or 'hiking': focus on scenic mountain roads.
    - General prompts: a balanced itinerary with must-see attractions.
    - **Two Modes:** If the user only asks for recommendations (e.g. "restaurants in Tainan"), reply with
      a short text and a list of POIs, and leave the waypoints empty so the map route does not change.

    Itinerary markdown rules:
    1. Use one heading per day, exactly like '## Day 1: Taipei to Yilan'.
    2. Format every point of interest as a Google Maps link whose query includes its name and city or
       district, e.g. [Taipei 101](https://www.google.com/maps/search/?api=1&query=Taipei+101,Xinyi+District,Taipei).
    3. For each day suggest one campervan-friendly campsite (露營車營地), and campervan-friendly parking
       when the main attraction is in a busy area. Do not list gas stations, toilets or supermarkets.
    4. Every day includes a '#### Driving Safety Reminder': the route is planned for standard cars, so watch
       for height restriction (限高) signs.
    5. The first day includes a '### Trip Kick-off Checklist' with emergency numbers: Police (110),
       Ambulance/Fire (119), Tourist Information Hotline (0800-011-765).
    6. The last day includes a '### Trip Wrap-up' with reminders to clean the van and refuel.
    """
)

_TEXT_MODE_INSTRUCTION = _BASE_INSTRUCTION + textwrap.dedent(
    """
    After the itinerary, append these three blocks, each on its own line, using strict JSON:
    START_DATE: YYYY-MM-DD
    WAYPOINTS: [{"name": "Taipei", "lat": 25.033, "lng": 121.5654}, ...]
    POIS: [{"name": "Taipei 101", "address": "No. 7, Section 5, Xinyi Road, Taipei", "lat": 25.0339, "lng": 121.5645}, ...]
    WAYPOINTS are the main cities that define the driving route, in driving order.
    POIS are all recommended locations with specific addresses.
    """
)

_JSON_MODE_INSTRUCTION = _BASE_INSTRUCTION + (
    "\nYour entire response MUST be a single JSON object matching the provided schema, "
    "with the markdown itinerary in the 'itinerary' property."
)

_PLACE = {
    "type": "OBJECT",
    "properties": {
        "name": {"type": "STRING"},
        "lat": {"type": "NUMBER"},
        "lng": {"type": "NUMBER"},
    },
    "required": ["name", "lat", "lng"],
}

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "itinerary": {"type": "STRING", "description": "The full day-by-day itinerary in Markdown format."},
        "startDate": {"type": "STRING", "description": "The start date of the trip in YYYY-MM-DD format."},
        "waypoints": {
            "type": "ARRAY",
            "description": "The main cities that define the driving route, with coordinates.",
            "items": _PLACE,
        },
        "pois": {
            "type": "ARRAY",
            "description": "All recommended locations with names, specific addresses and coordinates.",
            "items": {
                "type": "OBJECT",
                "properties": {**_PLACE["properties"], "address": {"type": "STRING"}},
                "required": ["name", "address", "lat", "lng"],
            },
        },
    },
    "required": ["itinerary", "startDate", "waypoints", "pois"],
}


def build_request(prompt: str, position: Position) -> str:
    return f"{prompt}\n\n(The user's current location is lat {position.lat:.4f}, lng {position.lng:.4f}.)"


def user_message_for(error: Exception) -> str:
    if "API key not valid" in str(error):
        return INVALID_KEY_MESSAGE
    return GENERIC_FAILURE_MESSAGE


class GeminiItineraryProvider:
    """Itinerary generation through Gemini, configured once at startup."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        response_mode: Optional[str] = None,
        model: Any = None,
    ) -> None:
        self.response_mode = (response_mode or CONFIG.response_mode).lower()
        if self.response_mode not in ("text", "json"):
            raise ValueError(f"Unknown response mode: {self.response_mode}")
        if model is None:
            api_key = api_key or CONFIG.gemini_api_key
            if not api_key:
                raise RuntimeError("Environment variable GEMINI_API_KEY is missing.")
            genai.configure(api_key=api_key)
            if self.response_mode == "json":
                model = genai.GenerativeModel(
                    model_name or CONFIG.gemini_model,
                    system_instruction=_JSON_MODE_INSTRUCTION,
                    generation_config={
                        "response_mime_type": "application/json",
                        "response_schema": RESPONSE_SCHEMA,
                    },
                )
            else:
                model = genai.GenerativeModel(
                    model_name or CONFIG.gemini_model,
                    system_instruction=_TEXT_MODE_INSTRUCTION,
                )
        self._model = model

    async def generate_itinerary(self, prompt: str, position: Position) -> ItineraryReply:
        start_time = time.monotonic()
        ok = False
        try:
            response = await self._model.generate_content_async(build_request(prompt, position))
            text = getattr(response, "text", None) or ""
            if self.response_mode == "json":
                payload = json.loads(text)
                if not isinstance(payload, dict):
                    raise ValueError("Structured reply is not a JSON object")
                result: ItineraryReply = payload
            else:
                result = text
            ok = True
        except Exception as e:
            logging.error("Error generating itinerary: %s", e)
            raise ProviderError(user_message_for(e)) from e
        finally:
            latency_ms = (time.monotonic() - start_time) * 1000
            log_data = {
                "ts": datetime.utcnow().isoformat(),
                "tool": "gemini",
                "fn": "generate_itinerary",
                "latency_ms": f"{latency_ms:.2f}",
                "ok": ok,
                "mode": self.response_mode,
            }
            logging.info(json.dumps(log_data))
        return result
