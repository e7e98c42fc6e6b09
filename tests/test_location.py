import asyncio

from navigator.config import CONFIG
from navigator.location import default_position, fixed_locator, resolve_position
from navigator.models import Position


KAOHSIUNG = Position(lat=22.6273, lng=120.3014)


def test_reported_position_is_used():
    assert asyncio.run(resolve_position(fixed_locator(KAOHSIUNG))) == KAOHSIUNG


def test_denied_position_uses_fallback():
    fallback = Position(lat=1.0, lng=2.0)
    assert asyncio.run(resolve_position(fixed_locator(None), fallback)) == fallback


def test_missing_capability_uses_configured_default():
    position = asyncio.run(resolve_position(None))
    assert position == default_position()
    assert (position.lat, position.lng) == (CONFIG.default_lat, CONFIG.default_lng)


def test_failing_locator_uses_fallback():
    fallback = Position(lat=1.0, lng=2.0)

    async def broken():
        raise RuntimeError("location service crashed")

    assert asyncio.run(resolve_position(broken, fallback)) == fallback
