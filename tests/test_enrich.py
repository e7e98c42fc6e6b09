import asyncio

from fakes import ITINERARY, SUNNY, FakeGateway
from navigator.enrich import FORECAST_UNAVAILABLE, enrich, location_for_day
from navigator.models import Waypoint


def _run(text, waypoints, start, gateway):
    return asyncio.run(enrich(text, waypoints, start, gateway))


def test_each_day_uses_the_next_waypoint_and_date(waypoints):
    gateway = FakeGateway()
    _run(ITINERARY, waypoints, "2024-07-22", gateway)
    yilan, hualien = waypoints[1], waypoints[2]
    assert gateway.calls == [
        (yilan.lat, yilan.lng, "2024-07-22"),
        (hualien.lat, hualien.lng, "2024-07-23"),
    ]


def test_forecast_is_spliced_under_each_heading(waypoints):
    gateway = FakeGateway({"2024-07-22": "🌧️ Slight rain, 24°C to 29°C"})
    out = _run(ITINERARY, waypoints, "2024-07-22", gateway)
    assert out == (
        "# Taipei to Hualien\n"
        "\n"
        "## Day 1: Taipei to Yilan\n\n**Weather Forecast:** 🌧️ Slight rain, 24°C to 29°C\n"
        "Drive along the coast.\n"
        "\n"
        f"## Day 2: Yilan to Hualien\n\n**Weather Forecast:** {SUNNY}\n"
        "Take the Suhua Highway.\n"
    )


def test_invalid_start_date_returns_text_unchanged(waypoints):
    gateway = FakeGateway()
    for start in ("not-a-date", "2024-13-45", "", None):
        assert _run(ITINERARY, waypoints, start, gateway) == ITINERARY
    assert gateway.calls == []


def test_missing_forecast_marks_only_that_day(waypoints):
    gateway = FakeGateway({"2024-07-23": None})
    out = _run(ITINERARY, waypoints, "2024-07-22", gateway)
    assert f"## Day 1: Taipei to Yilan\n\n**Weather Forecast:** {SUNNY}" in out
    assert f"## Day 2: Yilan to Hualien\n\n**Weather Forecast:** {FORECAST_UNAVAILABLE}" in out
    assert out.count(FORECAST_UNAVAILABLE) == 1


def test_gateway_exception_degrades_to_unavailable(waypoints):
    gateway = FakeGateway({"2024-07-22": RuntimeError("boom")})
    out = _run(ITINERARY, waypoints, "2024-07-22", gateway)
    assert f"## Day 1: Taipei to Yilan\n\n**Weather Forecast:** {FORECAST_UNAVAILABLE}" in out
    assert f"**Weather Forecast:** {SUNNY}" in out


def test_later_days_fall_back_to_the_last_waypoint():
    a = Waypoint(name="A", lat=25.0, lng=121.5)
    b = Waypoint(name="B", lat=24.0, lng=121.6)
    text = "## Day 1: A to B\n## Day 2: B\n## Day 3: B\n"
    gateway = FakeGateway()
    _run(text, [a, b], "2024-12-30", gateway)
    assert gateway.calls == [
        (24.0, 121.6, "2024-12-30"),
        (24.0, 121.6, "2024-12-31"),
        (24.0, 121.6, "2025-01-01"),
    ]


def test_single_waypoint_is_used_for_every_day():
    only = Waypoint(name="Kenting", lat=21.95, lng=120.8)
    assert location_for_day(0, [only]) == only
    assert location_for_day(5, [only]) == only
    assert location_for_day(0, []) is None


def test_no_waypoints_means_no_lookups():
    gateway = FakeGateway()
    assert _run(ITINERARY, [], "2024-07-22", gateway) == ITINERARY
    assert gateway.calls == []


def test_no_headings_leaves_text_alone(waypoints):
    gateway = FakeGateway()
    text = "Here are some noodle shops in Tainan."
    assert _run(text, waypoints, "2024-07-22", gateway) == text
    assert gateway.calls == []


class _SlowFirstGateway:
    """Earlier days resolve last."""

    async def forecast(self, lat, lng, date):
        delay = {"2024-07-22": 0.03, "2024-07-23": 0.0}[date]
        await asyncio.sleep(delay)
        return f"forecast for {date}"


def test_completion_order_does_not_reorder_the_text(waypoints):
    out = _run(ITINERARY, waypoints, "2024-07-22", _SlowFirstGateway())
    first = out.index("forecast for 2024-07-22")
    second = out.index("forecast for 2024-07-23")
    assert out.index("## Day 1") < first < out.index("## Day 2") < second
