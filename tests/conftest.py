from typing import List

import pytest

from fakes import WAYPOINTS, FakeGateway, FakeProvider
from navigator.models import Waypoint


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def waypoints() -> List[Waypoint]:
    return [Waypoint(**w) for w in WAYPOINTS]
