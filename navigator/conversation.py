"""One planning conversation: submission, immediate render, background enrichment.

A round renders the raw reply as soon as it arrives and then, if the reply
carried a start date and at least one waypoint, splices forecasts in the
background. The enrichment replaces whatever message is *last* when it
resolves. A newer round started in the meantime can therefore have its
reply overwritten by the older round's enriched text; that ordering is
accepted behaviour. Clearing the history bumps a generation counter and any
enrichment or reply that resolves afterwards is dropped.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Set
import asyncio
import logging

from pydantic import BaseModel

from . import extract
from .content import WELCOME_MESSAGE
from .enrich import enrich
from .location import Locator, resolve_position
from .models import ChatMessage, Invalid, PointOfInterest, Position, StructuredReply, Waypoint
from .provider import ItineraryProvider, ItineraryReply, ProviderError
from .weather import ForecastGateway


UNKNOWN_ERROR = "An unknown error occurred."


class RoundState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_STRUCTURED_DATA = "awaiting_structured_data"
    RENDERED = "rendered"
    ENRICHING = "enriching"


@dataclass(frozen=True)
class Replacement:
    """An enriched message and the position it was written to."""

    index: int
    message: ChatMessage


@dataclass
class Round:
    """Outcome of an accepted submission."""

    user_index: int
    assistant_index: Optional[int] = None
    failed: bool = False
    discarded: bool = False
    # Resolves to None when the enriched text was dropped
    enrichment: Optional["asyncio.Task[Optional[Replacement]]"] = None


class ConversationSnapshot(BaseModel):
    messages: List[ChatMessage]
    waypoints: List[Waypoint]
    pois: List[PointOfInterest]
    error: Optional[str]
    is_loading: bool
    state: RoundState
    draft: str


class Conversation:
    def __init__(
        self,
        provider: ItineraryProvider,
        gateway: ForecastGateway,
        fallback_position: Optional[Position] = None,
        welcome: ChatMessage = WELCOME_MESSAGE,
    ) -> None:
        self._provider = provider
        self._gateway = gateway
        self._fallback = fallback_position
        self._welcome = welcome
        self._generation = 0
        self._enrichments: Set["asyncio.Task[Optional[Replacement]]"] = set()

        self.messages: List[ChatMessage] = [welcome]
        self.waypoints: List[Waypoint] = []
        self.pois: List[PointOfInterest] = []
        self.error: Optional[str] = None
        self.is_loading = False
        self.draft = ""
        self.state = RoundState.IDLE

    async def submit(self, prompt: Optional[str] = None, locator: Optional[Locator] = None) -> Optional[Round]:
        """Run one round. Returns None when the submission is rejected.

        Blank prompts and submissions while another round is loading are
        rejected without touching any state. ``prompt`` defaults to ``draft``.
        """
        text = self.draft if prompt is None else prompt
        if not text.strip() or self.is_loading:
            return None

        self.state = RoundState.SUBMITTING
        self.error = None
        self.is_loading = True
        self.messages.append(ChatMessage(role="user", content=text))
        this_round = Round(user_index=len(self.messages) - 1)
        self.waypoints = []
        self.pois = []
        generation = self._generation

        try:
            position = await resolve_position(locator, self._fallback)
            self.state = RoundState.AWAITING_STRUCTURED_DATA
            failure: Optional[str] = None
            try:
                reply = await self._provider.generate_itinerary(text, position)
            except ProviderError as e:
                failure = str(e)
            except Exception:
                logging.exception("Itinerary provider raised an unexpected error")
                failure = UNKNOWN_ERROR

            if generation != self._generation:
                logging.info("History cleared while waiting for the provider; dropping reply")
                this_round.discarded = True
            elif failure is not None:
                self._fail(this_round, failure)
            else:
                self._render(this_round, reply)
            return this_round
        finally:
            self.is_loading = False
            self.draft = ""
            self._settle()

    def _fail(self, this_round: Round, message: str) -> None:
        self.error = message
        self.messages.append(ChatMessage(role="assistant", content=f"Sorry, I ran into an error: {message}"))
        this_round.failed = True
        this_round.assistant_index = len(self.messages) - 1

    def _render(self, this_round: Round, reply: ItineraryReply) -> None:
        data: StructuredReply
        if isinstance(reply, dict):
            data = extract.from_structured(reply)
        else:
            data = extract.from_text(reply)

        errors = [r.reason for r in (data.waypoints, data.pois) if isinstance(r, Invalid)]
        if errors:
            self.error = " ".join(errors)
        self.waypoints = list(data.waypoints.records)
        self.pois = list(data.pois.records)

        self.messages.append(ChatMessage(role="assistant", content=data.itinerary))
        this_round.assistant_index = len(self.messages) - 1
        self.state = RoundState.RENDERED

        if data.start_date and self.waypoints:
            task = asyncio.get_running_loop().create_task(
                self._enrich_in_background(self._generation, data.itinerary, list(self.waypoints), data.start_date)
            )
            self._enrichments.add(task)
            task.add_done_callback(self._enrichment_done)
            this_round.enrichment = task

    async def _enrich_in_background(
        self, generation: int, itinerary: str, waypoints: List[Waypoint], start_date: str
    ) -> Optional[Replacement]:
        try:
            enriched = await enrich(itinerary, waypoints, start_date, self._gateway)
        except Exception:
            logging.exception("Itinerary enrichment failed")
            return None
        if generation != self._generation:
            logging.info("History cleared during enrichment; dropping forecasts")
            return None
        message = ChatMessage(role="assistant", content=enriched)
        self.messages[-1] = message
        return Replacement(index=len(self.messages) - 1, message=message)

    def _enrichment_done(self, task: "asyncio.Task[Optional[Replacement]]") -> None:
        self._enrichments.discard(task)
        self._settle()

    def _settle(self) -> None:
        if self.is_loading:
            return
        self.state = RoundState.ENRICHING if self._enrichments else RoundState.IDLE

    def clear_history(self) -> None:
        self._generation += 1
        self.messages = [self._welcome]
        self.waypoints = []
        self.pois = []
        self.error = None
        self._settle()

    async def wait_for_enrichment(self) -> None:
        if self._enrichments:
            await asyncio.gather(*list(self._enrichments))

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            messages=list(self.messages),
            waypoints=list(self.waypoints),
            pois=list(self.pois),
            error=self.error,
            is_loading=self.is_loading,
            state=self.state,
            draft=self.draft,
        )
