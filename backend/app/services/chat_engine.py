"""
Sohbet isteğini sıralı stratejiler listesiyle yanıtlar.

Sıra: bilinen niyetler -> yapılandırılmış sorgu belirtimi -> genel model yanıtı.
Her strateji ya bir yanıt ya da None döner; ilk yanıt kazanır.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Optional, Sequence

from ..core.config import AssistantConfig
from ..core.logging_config import get_logger
from ..llm.composer import ResponseComposer
from ..llm.model_chain import generate_with_fallback
from ..llm.providers import LLMProvider, ModelsExhaustedError
from ..utils.text_matching import normalize_query
from .analytics.date_range import date_context_line, extract_range_token, resolve
from .analytics.intent_handlers import IntentHandlers
from .analytics.spec_pipeline import QuerySpecPipeline
from .analytics.store import OrderStore
from .analytics.turn import ChatTurn
from .intent_detector import detect_intent

logger = get_logger(__name__)

ANALYTICS_MODEL = "analytics"


@dataclass(frozen=True)
class ChatMessage:
    role: str  # user | assistant | system
    content: str


@dataclass(frozen=True)
class ChatReply:
    reply: str
    model: str
    strategy: str = ""


Strategy = Callable[[ChatTurn], Awaitable[Optional[ChatReply]]]


class EmptyUserMessageError(ValueError):
    """Son (sistem dışı) mesaj boş."""


def build_transcript(messages: Sequence[ChatMessage]) -> str:
    system_text = "\n".join(m.content for m in messages if m.role == "system")
    transcript = "\n".join(
        f"{'Asistan' if m.role == 'assistant' else 'Kullanıcı'}: {m.content}"
        for m in messages
        if m.role != "system"
    )
    return f"{system_text}\n\n{transcript}" if system_text else transcript


def build_turn(messages: Sequence[ChatMessage], user_id: Optional[str], today: date) -> ChatTurn:
    non_system = [m for m in messages if m.role != "system"]
    if not non_system or not (non_system[-1].content or "").strip():
        raise EmptyUserMessageError("empty_user_message")

    question = non_system[-1].content
    normalized = normalize_query(question)
    date_context = date_context_line(today)
    return ChatTurn(
        question=question,
        normalized=normalized,
        today=today,
        date_context=date_context,
        # Aralık niyetten bağımsız olarak isteğin başında bir kez çözülür
        date_range=resolve(extract_range_token(normalized), today),
        prompt=f"{date_context}\n\n{build_transcript(messages)}",
        user_id=user_id or None,
    )


class ChatEngine:
    def __init__(self, config: AssistantConfig, store: OrderStore, provider: LLMProvider):
        self.config = config
        self.store = store
        self.provider = provider
        candidates = config.model_candidates
        self.composer = ResponseComposer(provider, candidates)
        self.intents = IntentHandlers(store, self.composer)
        self.spec_pipeline = QuerySpecPipeline(store, provider, candidates, self.composer)
        self.strategies: List[tuple[str, Strategy]] = [
            ("intent", self.answer_with_intent),
            ("query_spec", self.answer_with_spec),
            ("general", self.answer_general),
        ]

    async def answer_with_intent(self, turn: ChatTurn) -> Optional[ChatReply]:
        if not turn.user_id:
            return None
        match = detect_intent(turn.normalized)
        if not match.matched:
            return None
        reply = await self.intents.handle(turn, match)
        if reply is None:
            return None
        return ChatReply(reply=reply, model=ANALYTICS_MODEL)

    async def answer_with_spec(self, turn: ChatTurn) -> Optional[ChatReply]:
        if not turn.user_id:
            return None
        reply = await self.spec_pipeline.resolve_via_spec(turn.user_id, turn.question, turn.date_context)
        if reply is None:
            return None
        return ChatReply(reply=reply, model=ANALYTICS_MODEL)

    async def answer_general(self, turn: ChatTurn) -> Optional[ChatReply]:
        text, model_id = await generate_with_fallback(self.provider, self.config.model_candidates, turn.prompt)
        return ChatReply(reply=text, model=model_id)

    async def answer(self, messages: Sequence[ChatMessage], user_id: Optional[str] = None, today: Optional[date] = None) -> ChatReply:
        # "Bugün" istek başına bir kez hesaplanır; tüm aralıklar aynı referansı kullanır
        turn = build_turn(messages, user_id, today or date.today())
        for name, strategy in self.strategies:
            result = await strategy(turn)
            if result is not None:
                logger.info("chat_answered", strategy=name, model=result.model, has_user=bool(turn.user_id))
                return ChatReply(reply=result.reply, model=result.model, strategy=name)
        raise ModelsExhaustedError()
