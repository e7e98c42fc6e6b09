from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class Position(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class Waypoint(BaseModel, frozen=True):
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class PointOfInterest(BaseModel, frozen=True):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


@dataclass(frozen=True)
class Ok:
    """Extraction succeeded; ``records`` may be empty when the block was absent."""

    records: List[Any] = field(default_factory=list)


@dataclass(frozen=True)
class Invalid:
    """Extraction failed; ``reason`` is safe to show to the user."""

    reason: str

    @property
    def records(self) -> List[Any]:
        return []


ExtractionResult = Union[Ok, Invalid]


@dataclass(frozen=True)
class StructuredReply:
    itinerary: str
    start_date: Optional[str]
    waypoints: ExtractionResult
    pois: ExtractionResult
