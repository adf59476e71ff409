"""AI assistant conversations."""

from typing import List

from fastapi import APIRouter, Depends

from adjusterhub.dependencies import get_assistant_service, get_current_user
from adjusterhub.logging_config import get_logger
from adjusterhub.models.user import UserModel
from adjusterhub.schemas.chat import AssistantAction, ChatRequest, ChatResponse, ChatSession, ChatSessionDetail
from adjusterhub.services.assistant_service import AssistantService

logger = get_logger(__name__)
router = APIRouter()


@router.post("", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    user: UserModel = Depends(get_current_user),
    service: AssistantService = Depends(get_assistant_service),
) -> ChatResponse:
    """Send a message to the assistant, starting a session when none is given.

    When the model is unavailable the reply is a canned apology with
    ``fallback: true``; the exchange is still stored.
    """
    session, reply = service.chat(user, payload.message, payload.session_id)
    logger.info(
        "assistant_replied",
        session_id=session.id,
        actions=len(reply.actions),
        fallback=reply.fallback,
    )
    return ChatResponse(
        session_id=session.id,
        message=reply.message,
        actions=[AssistantAction(**a) for a in reply.actions],
        suggestions=reply.suggestions,
        fallback=reply.fallback,
    )


@router.get("/sessions", response_model=List[ChatSession])
def list_sessions(
    user: UserModel = Depends(get_current_user),
    service: AssistantService = Depends(get_assistant_service),
) -> List[ChatSession]:
    return [ChatSession.model_validate(s) for s in service.list_sessions(user)]


@router.get("/sessions/{session_id}", response_model=ChatSessionDetail)
def get_session(
    session_id: int,
    user: UserModel = Depends(get_current_user),
    service: AssistantService = Depends(get_assistant_service),
) -> ChatSessionDetail:
    return ChatSessionDetail.model_validate(service.get_session(user, session_id))
