# backend/app/routers/chat.py
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import AssistantConfig
from ..core.deps import get_assistant_config, get_chat_engine
from ..llm.providers import ModelsExhaustedError, ProviderError, is_credential_error
from ..services.analytics.exceptions import StoreError
from ..services.chat_engine import ChatEngine, ChatMessage, EmptyUserMessageError

router = APIRouter(prefix="/api/chat", tags=["Chat"])
logger = logging.getLogger(__name__)

API_KEY_HINT = (
    "Geçersiz veya kısıtlı Google AI Studio anahtarı. AI Studio'dan yeni bir anahtar oluşturup .env dosyasına "
    "ekleyin; application restrictions: None; API restrictions: Generative Language API (veya Don't restrict). "
    "Ardından backend'i yeniden başlatın."
)


class ChatMessageIn(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str = ""


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: Optional[List[ChatMessageIn]] = None
    user_id: Optional[str] = Field(None, alias="userId")


class ChatResponse(BaseModel):
    reply: str
    model: str


def _error(status_code: int, error_code: str, detail: Optional[str] = None) -> JSONResponse:
    payload = {"ok": False, "error_code": error_code}
    if detail is not None:
        payload["detail"] = detail
    return JSONResponse(payload, status_code=status_code)


@router.post("", response_model=ChatResponse)
async def chat(
    req: ChatRequest,
    config: AssistantConfig = Depends(get_assistant_config),
    engine: Optional[ChatEngine] = Depends(get_chat_engine),
):
    if not req.messages:
        return _error(400, "MESSAGES_REQUIRED", "messages required")

    if not config.has_api_key or engine is None:
        return _error(500, "MISSING_API_KEY", "Missing GOOGLE_GENAI_API_KEY")

    messages = [ChatMessage(role=m.role, content=m.content) for m in req.messages]
    try:
        result = await engine.answer(messages, user_id=req.user_id)
    except EmptyUserMessageError:
        return _error(400, "EMPTY_USER_MESSAGE", "empty_user_message")
    except ModelsExhaustedError as e:
        logger.error(f"[CHAT] Tüm aday modeller başarısız: {e}")
        return _error(500, "NO_SUPPORTED_MODEL", str(e))
    except StoreError as e:
        logger.error(f"[CHAT] Sipariş deposu hatası: {e}")
        return _error(500, "STORE_UNAVAILABLE", str(e))
    except ProviderError as e:
        if is_credential_error(e):
            logger.warning("[CHAT] Model sağlayıcısı API anahtarını reddetti")
            return _error(401, "API_KEY_INVALID", API_KEY_HINT)
        logger.error(f"[CHAT] Model sağlayıcısı hatası: {e}")
        return _error(500, "CHAT_FAILED", str(e))

    return ChatResponse(reply=result.reply, model=result.model)
