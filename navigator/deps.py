from typing import Callable, Dict

from fastapi import HTTPException, Request, status

from .conversation import Conversation


class ConversationStore:
    """In-memory conversations keyed by session id; nothing outlives the process."""

    def __init__(self, factory: Callable[[], Conversation]) -> None:
        self._factory = factory
        self._sessions: Dict[str, Conversation] = {}

    def get(self, session_id: str) -> Conversation:
        conversation = self._sessions.get(session_id)
        if conversation is None:
            conversation = self._factory()
            self._sessions[session_id] = conversation
        return conversation


def get_conversation(session_id: str, request: Request) -> Conversation:
    store = getattr(request.app.state, "conversations", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Conversation store not initialized",
        )
    return store.get(session_id)
