"""Splice per-day weather forecasts into a markdown itinerary.

Each ``## Day N`` heading is paired with the destination of that day's drive:
heading ``i`` uses ``waypoints[i + 1]`` (waypoint 0 is where the trip starts)
and falls back to the final waypoint once the list runs out. Day ``i`` is
dated ``start + i`` whether or not earlier lookups succeeded.

An unparsable start date leaves the text untouched. That is a deliberate
no-op: the itinerary is still shown, just without forecasts.
"""
from datetime import date, timedelta
from typing import List, Optional, Sequence
import asyncio
import logging
import re

from .models import Waypoint
from .weather import ForecastGateway


DAY_HEADING = re.compile(r"^#{2,3}[ \t]+Day[ \t]+\d+\b[^\r\n]*", re.MULTILINE)
FORECAST_UNAVAILABLE = "❓ Forecast unavailable"


def parse_start_date(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        return None


def location_for_day(index: int, waypoints: Sequence[Waypoint]) -> Optional[Waypoint]:
    if not waypoints:
        return None
    if index + 1 < len(waypoints):
        return waypoints[index + 1]
    return waypoints[-1]


def forecast_line(summary: Optional[str]) -> str:
    return f"\n\n**Weather Forecast:** {summary or FORECAST_UNAVAILABLE}"


async def _lookup(gateway: ForecastGateway, location: Waypoint, day: date) -> Optional[str]:
    try:
        return await gateway.forecast(location.lat, location.lng, day.isoformat())
    except Exception as e:
        logging.error("Forecast lookup for %s on %s failed: %s", location.name, day, e)
        return None


async def enrich(
    itinerary_text: str,
    waypoints: Sequence[Waypoint],
    start_date_text: Optional[str],
    gateway: ForecastGateway,
) -> str:
    start = parse_start_date(start_date_text)
    if start is None:
        logging.error("Invalid start date provided by AI: %r", start_date_text)
        return itinerary_text

    headings = list(DAY_HEADING.finditer(itinerary_text))
    slots: List[int] = []
    lookups = []
    current = start
    for i, heading in enumerate(headings):
        location = location_for_day(i, waypoints)
        if location is not None:
            slots.append(heading.end())
            lookups.append(_lookup(gateway, location, current))
        current += timedelta(days=1)

    if not lookups:
        return itinerary_text

    # gather keeps results in request order, so splicing follows the document
    summaries = await asyncio.gather(*lookups)

    parts: List[str] = []
    cursor = 0
    for pos, summary in zip(slots, summaries):
        parts.append(itinerary_text[cursor:pos])
        parts.append(forecast_line(summary))
        cursor = pos
    parts.append(itinerary_text[cursor:])
    return "".join(parts)
