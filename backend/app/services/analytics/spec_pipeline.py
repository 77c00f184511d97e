"""Eşleşmeyen sorular için: model JSON belirtimi üretir, doğrulanır, veriler üzerinde çalıştırılır."""
from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from ...llm.composer import ResponseComposer
from ...llm.model_chain import try_models
from ...llm.providers import LLMProvider
from .aggregation import QueryResult, aggregate
from .query_spec import QuerySpec, build_spec_prompt, parse_query_spec
from .store import OrderStore

logger = logging.getLogger(__name__)


def render_result(result: QueryResult) -> str:
    """Kompozisyon başarısız olursa kullanılan belirlenimci metin."""
    suffix = "" if result.metric == "count" else " TL"
    if result.group_by == "none":
        return f"Veritabanı sonucu: {result.rows[0].value}{suffix}."
    lines = [f"{i}. {row.key}: {row.value}{suffix}" for i, row in enumerate(result.rows, start=1)]
    return "Veritabanı sonuçları:\n" + "\n".join(lines)


class QuerySpecPipeline:
    def __init__(
        self,
        store: OrderStore,
        provider: LLMProvider,
        candidates: Sequence[str],
        composer: ResponseComposer,
    ):
        self.store = store
        self.provider = provider
        self.candidates = tuple(candidates)
        self.composer = composer

    async def generate_spec(self, question: str, date_context: str) -> Optional[QuerySpec]:
        text = await try_models(self.provider, self.candidates, build_spec_prompt(question, date_context))
        if not text:
            return None
        return parse_query_spec(text)

    async def execute(self, user_id: str, spec: QuerySpec) -> QueryResult:
        rows = await self.store.fetch_orders(user_id, spec.to_range())
        return aggregate(
            rows,
            spec.metric,
            field_name=spec.field_name,
            group_by=spec.group_by,
            filters=spec.to_filters(),
            limit=spec.limit,
        )

    async def resolve_via_spec(self, user_id: str, question: str, date_context: str) -> Optional[str]:
        """
        Yanıt metni ya da None. None: çözülemedi, çağıran genel yedeğe geçer.

        Bu katmandaki hiçbir hata dışarı sızmaz; hepsi loglanıp None'a çevrilir.
        """
        try:
            spec = await self.generate_spec(question, date_context)
            if spec is None:
                return None
            result = await self.execute(user_id, spec)
            if not result.rows:
                logger.info(f"[SPEC] Boş sonuç, genel yedeğe geçiliyor: {spec.model_dump()}")
                return None

            return await self.composer.compose(
                question=question,
                facts=json.dumps(result.to_dict(), ensure_ascii=False),
                fallback=render_result(result),
                date_context=date_context,
                facts_title="Sonuclar(JSON)",
                instruction=(
                    "Aşağıdaki veritabanı sonuçlarına dayanarak kullanıcıya doğal, kısa ve net bir Türkçe yanıt yaz. "
                    "Yalnızca verilen sonuçlara dayan. Gerekirse 1-2 cümlelik açıklama ekle."
                ),
            )
        except Exception as e:
            logger.warning(f"[SPEC] Yapılandırılmış sorgu yolu başarısız: {type(e).__name__}: {e}")
            return None
