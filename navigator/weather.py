from typing import Optional, Protocol
import logging
import math
import time
import json
from datetime import datetime

import httpx

from .config import CONFIG


WMO_CODE_MAP = {
    0: ("Clear sky", "☀️"),
    1: ("Mainly clear", "🌤️"),
    2: ("Partly cloudy", "⛅️"),
    3: ("Overcast", "☁️"),
    45: ("Fog", "🌫️"),
    48: ("Depositing rime fog", "🌫️"),
    51: ("Light drizzle", "🌦️"),
    53: ("Moderate drizzle", "🌦️"),
    55: ("Dense drizzle", "🌦️"),
    56: ("Light freezing drizzle", "🌨️"),
    57: ("Dense freezing drizzle", "🌨️"),
    61: ("Slight rain", "🌧️"),
    63: ("Moderate rain", "🌧️"),
    65: ("Heavy rain", "🌧️"),
    66: ("Light freezing rain", "🌨️"),
    67: ("Heavy freezing rain", "🌨️"),
    71: ("Slight snow fall", "❄️"),
    73: ("Moderate snow fall", "❄️"),
    75: ("Heavy snow fall", "❄️"),
    77: ("Snow grains", "❄️"),
    80: ("Slight rain showers", "🌦️"),
    81: ("Moderate rain showers", "🌦️"),
    82: ("Violent rain showers", "⛈️"),
    85: ("Slight snow showers", "🌨️"),
    86: ("Heavy snow showers", "🌨️"),
    95: ("Thunderstorm", "⛈️"),
    96: ("Thunderstorm with slight hail", "⛈️"),
    99: ("Thunderstorm with heavy hail", "⛈️"),
}
UNKNOWN_WEATHER = ("Weather", "🌡️")


class ForecastGateway(Protocol):
    async def forecast(self, lat: float, lng: float, date: str) -> Optional[str]:
        """Human-readable forecast for one day, or None when unavailable."""
        ...


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def describe_daily(data: dict) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    daily = data.get("daily") or {}
    if not isinstance(daily, dict):
        return None
    codes = daily.get("weathercode") or []
    maxes = daily.get("temperature_2m_max") or []
    mins = daily.get("temperature_2m_min") or []
    if not codes or not isinstance(codes, list):
        return None
    code = codes[0]
    if isinstance(code, bool) or not isinstance(code, (int, float)):
        return None
    try:
        max_temp = _round_half_up(float(maxes[0]))
        min_temp = _round_half_up(float(mins[0]))
    except (ValueError, IndexError, TypeError, KeyError, OverflowError):
        return None
    description, icon = WMO_CODE_MAP.get(code, UNKNOWN_WEATHER)
    return f"{icon} {description}, {min_temp}°C to {max_temp}°C"


class OpenMeteoGateway:
    """Daily forecasts from Open-Meteo. Every failure is reported as None."""

    def __init__(self, client: httpx.AsyncClient, base_url: Optional[str] = None) -> None:
        self._client = client
        self._base_url = base_url or CONFIG.open_meteo_base

    async def forecast(self, lat: float, lng: float, date: str) -> Optional[str]:
        start_time = time.monotonic()
        params = {
            "latitude": lat,
            "longitude": lng,
            "daily": "weathercode,temperature_2m_max,temperature_2m_min",
            "timezone": "auto",
            "start_date": date,
            "end_date": date,
        }
        headers = {"User-Agent": CONFIG.user_agent}
        http_status = None
        summary = None
        try:
            resp = await self._client.get(self._base_url, params=params, headers=headers)
            http_status = resp.status_code
            if resp.status_code != 200:
                logging.error("Open-Meteo error: %s", resp.status_code)
            else:
                summary = describe_daily(resp.json())
        except httpx.HTTPError as e:
            logging.error("Open-Meteo request failed: %s", e)
        except ValueError as e:
            logging.error("Open-Meteo response malformed: %s", e)

        latency_ms = (time.monotonic() - start_time) * 1000
        log_data = {
            "ts": datetime.utcnow().isoformat(),
            "tool": "open-meteo",
            "fn": "forecast",
            "latency_ms": f"{latency_ms:.2f}",
            "ok": summary is not None,
            "http_status": http_status,
        }
        logging.info(json.dumps(log_data))
        return summary
