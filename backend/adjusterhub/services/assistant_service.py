"""AI assistant conversations backed by the Claude API.

Replies may carry inline markers that the UI turns into buttons:

    [ACTION:{"type": "navigate", "data": {"path": "/dashboard/claims"}}]
    [SUGGEST:Show my pending earnings]

Markers are parsed out of the text before it is stored and returned.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import anthropic
from sqlalchemy.orm import Session

from adjusterhub.clients.llm_client import LLMClient
from adjusterhub.errors import AppError
from adjusterhub.models.chat import ChatSessionModel
from adjusterhub.models.user import UserModel
from adjusterhub.prompts.manager import PromptManager
from adjusterhub.repositories.chat_repo import ChatRepository
from adjusterhub.repositories.claim_repo import ClaimRepository
from adjusterhub.repositories.earning_repo import EarningRepository
from adjusterhub.schemas.enums import ChatRole, EarningStatus
from adjusterhub.security.sanitize import sanitize_text

logger = logging.getLogger(__name__)

ACTION_RE = re.compile(r"\[ACTION:([^\]]+)\]")
SUGGEST_RE = re.compile(r"\[SUGGEST:([^\]]+)\]")

FALLBACK_MESSAGE = (
    "I apologize, but I'm experiencing technical difficulties. "
    "Please try again in a moment or contact support if the issue persists."
)
FALLBACK_SUGGESTIONS = ["Contact Support", "Try Again Later"]
EMPTY_REPLY = "I apologize, but I encountered an issue generating a response. Please try again."

HISTORY_LIMIT = 20
TITLE_WORDS = 6


@dataclass
class AssistantReply:
    message: str
    actions: List[Dict[str, Any]] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    fallback: bool = False


def parse_reply(content: str) -> AssistantReply:
    """Extract ACTION/SUGGEST markers; malformed action JSON is dropped."""
    actions = []
    for raw in ACTION_RE.findall(content):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Dropping malformed assistant action: %s", raw)
            continue
        if isinstance(data, dict) and data.get("type"):
            actions.append({"type": str(data["type"]), "payload": data.get("data") or {}})

    suggestions = [s.strip() for s in SUGGEST_RE.findall(content) if s.strip()]
    message = SUGGEST_RE.sub("", ACTION_RE.sub("", content)).strip()
    return AssistantReply(message=message or EMPTY_REPLY, actions=actions, suggestions=suggestions)


def session_title(message: str) -> str:
    words = message.split()
    title = " ".join(words[:TITLE_WORDS])
    if len(words) > TITLE_WORDS:
        title += "..."
    return title or "New Chat"


class AssistantService:
    def __init__(
        self,
        db: Session,
        chat_repo: ChatRepository,
        claim_repo: ClaimRepository,
        earning_repo: EarningRepository,
        llm_client: LLMClient,
        prompts: PromptManager,
    ):
        self.db = db
        self.chats = chat_repo
        self.claims = claim_repo
        self.earnings = earning_repo
        self.llm = llm_client
        self.prompts = prompts

    def chat(self, user: UserModel, message: str, session_id: Optional[int] = None) -> Tuple[ChatSessionModel, AssistantReply]:
        text = sanitize_text(message)
        if not text:
            raise AppError.validation("Message is empty")

        if session_id is not None:
            session = self.chats.get_for_user(session_id, user.id)
            if session is None:
                raise AppError.not_found("Chat session")
        else:
            session = self.chats.create(ChatSessionModel(user_id=user.id, title=session_title(text)))

        self.chats.add_message(session, ChatRole.USER.value, text)
        window = self.chats.recent_messages(session.id, limit=HISTORY_LIMIT)
        # the window must open on a user turn
        while window and window[0].role != ChatRole.USER.value:
            window.pop(0)
        history = [{"role": m.role, "content": m.content} for m in window]
        reply = self._ask(user, history)

        self.chats.add_message(
            session,
            ChatRole.ASSISTANT.value,
            reply.message,
            meta={"actions": reply.actions, "suggestions": reply.suggestions, "fallback": reply.fallback},
        )
        self.db.commit()
        return session, reply

    def list_sessions(self, user: UserModel) -> List[ChatSessionModel]:
        return self.chats.list_for_user(user.id)

    def get_session(self, user: UserModel, session_id: int) -> ChatSessionModel:
        session = self.chats.get_for_user(session_id, user.id)
        if session is None:
            raise AppError.not_found("Chat session")
        return session

    def build_system_prompt(self, user: UserModel) -> str:
        active = self.claims.active_for_adjuster(user.id)
        pending = [e for e in self.earnings.for_user(user.id) if e.status == EarningStatus.PENDING.value]
        recent = ", ".join(f"{c.claim_number} ({c.status})" for c in active[:3]) or "none"
        return self.prompts.render(
            "assistant_system",
            name=user.full_name,
            role=user.role,
            specialties=", ".join(user.specialties or []) or "General adjusting",
            active_claims=len(active),
            recent_claims=recent,
            pending_earnings=f"${sum(e.amount for e in pending):,.2f}",
        )

    def _ask(self, user: UserModel, history: List[Dict[str, str]]) -> AssistantReply:
        if not self.llm.configured:
            logger.warning("Assistant called without an Anthropic API key; returning fallback")
            return AssistantReply(message=FALLBACK_MESSAGE, suggestions=list(FALLBACK_SUGGESTIONS), fallback=True)
        try:
            content = self.llm.chat(self.build_system_prompt(user), history)
        except anthropic.APIError as exc:
            logger.error("Assistant request failed for user %d: %s", user.id, exc)
            return AssistantReply(message=FALLBACK_MESSAGE, suggestions=list(FALLBACK_SUGGESTIONS), fallback=True)
        return parse_reply(content)
