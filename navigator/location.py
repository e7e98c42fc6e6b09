from typing import Awaitable, Callable, Optional
import logging

from .config import CONFIG
from .models import Position


class LocationUnavailable(Exception):
    """The caller denied access to its location or cannot provide one."""


Locator = Callable[[], Awaitable[Optional[Position]]]


def default_position() -> Position:
    return Position(lat=CONFIG.default_lat, lng=CONFIG.default_lng)


def fixed_locator(position: Optional[Position]) -> Locator:
    """Locator for a position already reported by the client (None = denied)."""

    async def locate() -> Optional[Position]:
        if position is None:
            raise LocationUnavailable("Location permission denied")
        return position

    return locate


async def resolve_position(locator: Optional[Locator], fallback: Optional[Position] = None) -> Position:
    fallback = fallback or default_position()
    if locator is None:
        logging.warning("Geolocation is not supported by this client. Using the default location.")
        return fallback
    try:
        position = await locator()
    except LocationUnavailable as e:
        logging.warning("%s. Using the default location.", e)
        return fallback
    except Exception as e:
        logging.warning("Locating the client failed (%s). Using the default location.", e)
        return fallback
    return position or fallback
