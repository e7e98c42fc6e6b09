from typing import Any, AsyncIterator, Dict, Optional
import asyncio
import json

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ..conversation import Conversation, ConversationSnapshot, Replacement
from ..deps import get_conversation
from ..location import fixed_locator
from ..map_view import MapView, build_map_view
from ..models import Position


router = APIRouter()


class SubmitRequest(BaseModel):
    prompt: str
    # Omitted when the client denied or lacks geolocation
    position: Optional[Position] = None


def _event(payload: Dict[str, Any]) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _message_event(kind: str, conversation: Conversation, index: int) -> str:
    return _event({"type": kind, "index": index, "message": conversation.messages[index].model_dump()})


def _still_present(conversation: Conversation, replacement: Replacement) -> bool:
    messages = conversation.messages
    return replacement.index < len(messages) and messages[replacement.index] is replacement.message


async def stream_round(conversation: Conversation, req: SubmitRequest) -> AsyncIterator[str]:
    this_round = await conversation.submit(req.prompt, locator=fixed_locator(req.position))
    if this_round is None:
        reason = "empty" if not req.prompt.strip() else "busy"
        yield _event({"type": "rejected", "reason": reason})
        yield "data: [DONE]\n\n"
        return
    if this_round.discarded:
        yield _event({"type": "rejected", "reason": "cleared"})
        yield "data: [DONE]\n\n"
        return

    yield _message_event("message", conversation, this_round.user_index)
    if this_round.assistant_index is not None:
        yield _message_event("message", conversation, this_round.assistant_index)
    if conversation.error:
        yield _event({"type": "error", "content": conversation.error})
    yield _event({"type": "map", "view": build_map_view(conversation.waypoints, conversation.pois).model_dump()})

    if this_round.enrichment is not None:
        yield _event({"type": "status", "content": "Adding weather forecasts..."})
        # A disconnecting client must not cancel the enrichment itself
        replacement = await asyncio.shield(this_round.enrichment)
        # Skipped when the history was cleared after the forecasts landed
        if replacement is not None and _still_present(conversation, replacement):
            yield _event(
                {
                    "type": "message_replaced",
                    "index": replacement.index,
                    "message": replacement.message.model_dump(),
                }
            )
    yield "data: [DONE]\n\n"


@router.post("/{session_id}/messages")
async def submit_message(req: SubmitRequest, conversation: Conversation = Depends(get_conversation)):
    return StreamingResponse(stream_round(conversation, req), media_type="text/event-stream")


@router.get("/{session_id}", response_model=ConversationSnapshot)
async def read_conversation(conversation: Conversation = Depends(get_conversation)) -> ConversationSnapshot:
    return conversation.snapshot()


@router.delete("/{session_id}/messages", response_model=ConversationSnapshot)
async def clear_history(conversation: Conversation = Depends(get_conversation)) -> ConversationSnapshot:
    conversation.clear_history()
    return conversation.snapshot()


@router.get("/{session_id}/map", response_model=MapView)
async def read_map(conversation: Conversation = Depends(get_conversation)) -> MapView:
    return build_map_view(conversation.waypoints, conversation.pois)
