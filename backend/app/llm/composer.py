"""
Hesaplanmış verilerden dayanaklı (grounded) doğal dil yanıtı üretimi.

Model yalnızca verilen bilgileri yeniden ifade eder; üretim başarısız olursa
ya da boş dönerse belirlenimci (deterministic) yedek metin kullanılır.
"""
from __future__ import annotations

import logging
from typing import Sequence

from .model_chain import try_models
from .providers import LLMProvider

logger = logging.getLogger(__name__)

GROUNDED_INSTRUCTION = (
    "Aşağıdaki veritabanı bilgilerine dayanarak kullanıcıya doğal ve kısa bir Türkçe yanıt yaz. "
    "Sadece verilen bilgilere dayan, bilgiler dışına çıkma ve uydurma bilgi verme."
)


def build_grounded_prompt(date_context: str, instruction: str, facts_title: str, facts: str, question: str) -> str:
    return (
        f"{date_context}\n\n"
        f"{instruction}\n\n"
        f"{facts_title}:\n{facts}\n\n"
        f"Kullanıcı sorusu:\n{question}"
    )


class ResponseComposer:
    def __init__(self, provider: LLMProvider, candidates: Sequence[str]):
        self.provider = provider
        self.candidates = tuple(candidates)

    async def compose(
        self,
        *,
        question: str,
        facts: str,
        fallback: str,
        date_context: str,
        facts_title: str = "Bilgiler",
        instruction: str = GROUNDED_INSTRUCTION,
    ) -> str:
        prompt = build_grounded_prompt(date_context, instruction, facts_title, facts, question)
        try:
            composed = await try_models(self.provider, self.candidates, prompt)
        except Exception as e:
            # Anahtar hatası dahil: veriye dayalı yanıt yedek metinle yine döner
            logger.warning(f"[COMPOSER] Üretim başarısız, yedek metin kullanılıyor: {e}")
            return fallback
        return composed or fallback
