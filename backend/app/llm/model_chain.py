"""Aday model listesi üzerinde sırayla deneme."""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .providers import LLMProvider, ModelsExhaustedError, is_soft_model_error

logger = logging.getLogger(__name__)

EMPTY_REPLY_TEXT = "Yanıt alınamadı."


async def try_models(provider: LLMProvider, candidates: Sequence[str], prompt: str) -> Optional[str]:
    """
    Adayları sırayla dener, ilk boş olmayan metni döner.

    'Model bulunamadı' sınıfındaki hatalar bir sonraki adaya geçer; diğer tüm
    hatalar (ör. geçersiz anahtar) hemen yükseltilir. Hepsi yumuşak hata verirse
    veya hiçbiri metin dönmezse None.
    """
    for model_id in candidates:
        try:
            text = await provider.generate(model_id, prompt)
        except Exception as e:
            if is_soft_model_error(e):
                logger.info(f"[MODEL_CHAIN] {model_id} kullanılamıyor, sıradaki deneniyor: {e}")
                continue
            raise
        if text and text.strip():
            return text.strip()
    return None


async def generate_with_fallback(provider: LLMProvider, candidates: Sequence[str], prompt: str) -> Tuple[str, str]:
    """
    Genel (veriye dayanmayan) yanıt: ilk yanıt veren modelin metni ve kimliği.

    Yanıt veren model boş metin dönerse EMPTY_REPLY_TEXT kullanılır.
    Tüm adaylar yumuşak hata verirse ModelsExhaustedError.
    """
    for model_id in candidates:
        try:
            text = await provider.generate(model_id, prompt)
        except Exception as e:
            if is_soft_model_error(e):
                logger.info(f"[MODEL_CHAIN] {model_id} kullanılamıyor, sıradaki deneniyor: {e}")
                continue
            raise
        return (text.strip() if text and text.strip() else EMPTY_REPLY_TEXT), model_id
    raise ModelsExhaustedError()
