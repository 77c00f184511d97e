"""
Bilinen niyetler için veriye dayalı yanıtlar.

Her işleyici önce verileri hesaplar ve belirlenimci bir yedek metin kurar,
sonra ResponseComposer ile daha akıcı bir ifade ister.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Optional

from ...llm.composer import ResponseComposer
from ..intent_detector import DEFAULT_TOP_N, Intent, IntentMatch
from .aggregation import QueryResult, aggregate, compute_metric, latest_day_stats
from .store import FullContext, OrderStore
from .turn import ChatTurn

logger = logging.getLogger(__name__)

NO_RECORDS_TEXT = "Bu aralıkta kayıt bulunamadı."
NO_RECORD_TEXT = "Kayıt bulunamadı."


def _tl(value: Decimal) -> str:
    return f"{value:.2f} TL"


def _breakdown_lines(result: QueryResult, numbered: bool = False) -> str:
    lines = []
    for i, row in enumerate(result.rows, start=1):
        prefix = f"{i}. " if numbered else ""
        lines.append(f"{prefix}{row.key}: {_tl(row.value)}")
    return "\n".join(lines)


class IntentHandlers:
    def __init__(self, store: OrderStore, composer: ResponseComposer):
        self.store = store
        self.composer = composer
        self._handlers: Dict[Intent, Callable[[ChatTurn, IntentMatch], Awaitable[str]]] = {
            Intent.LATEST: self.latest,
            Intent.SUMMARY: self.summary,
            Intent.TOP_ITEMS: self.top_items,
            Intent.MENU_GROUP: self.menu_groups,
            Intent.SERVICE_TYPE: self.service_types,
        }

    async def handle(self, turn: ChatTurn, match: IntentMatch) -> Optional[str]:
        handler = self._handlers.get(match.intent)
        if handler is None or not turn.user_id:
            return None
        return await handler(turn, match)

    async def latest(self, turn: ChatTurn, match: IntentMatch) -> str:
        rows = await self.store.fetch_orders(turn.user_id, turn.date_range)
        stats = latest_day_stats(rows)
        if stats is None:
            return NO_RECORD_TEXT
        facts = (
            f"En son kayıt tarihi: {stats['date']}\n"
            f"O günkü sipariş sayısı: {stats['count']}\n"
            f"O günkü gelir: {_tl(stats['total_revenue'])}"
        )
        fallback = (
            f"En son veri {stats['date']} tarihinde girildi. "
            f"O gün {stats['count']} sipariş ve toplam ₺{stats['total_revenue']:.2f} gelir var."
        )
        return await self.composer.compose(
            question=turn.question, facts=facts, fallback=fallback, date_context=turn.date_context
        )

    async def _full_context(self, turn: ChatTurn) -> Optional[FullContext]:
        try:
            return await self.store.fetch_full_context(turn.user_id, turn.today)
        except Exception as e:
            # Bağlam zenginleştirme en iyi çaba: yoksa özet yine döner
            logger.warning(f"[INTENT] Genel bağlam alınamadı: {e}")
            return None

    async def summary(self, turn: ChatTurn, match: IntentMatch) -> str:
        rows = await self.store.fetch_orders(turn.user_id, turn.date_range)
        if not rows:
            return NO_RECORDS_TEXT
        total_revenue = compute_metric(rows, "sum")
        order_count = compute_metric(rows, "count")
        average_order = compute_metric(rows, "avg")

        fact_lines: List[str] = [
            "Seçili dönem özet:",
            f"Toplam gelir: {_tl(total_revenue)}",
            f"Sipariş sayısı: {order_count}",
            f"Ortalama sepet: {_tl(average_order)}",
        ]
        full_ctx = await self._full_context(turn)
        if full_ctx is not None:
            fact_lines.append("Genel bağlam:")
            fact_lines.extend(full_ctx.to_fact_lines())

        facts = "\n".join(fact_lines)
        fallback = "Seçili aralık için özet:\n" + "\n".join(f"- {line}" for line in fact_lines[1:])
        return await self.composer.compose(
            question=turn.question,
            facts=facts,
            fallback=fallback,
            date_context=turn.date_context,
            instruction=(
                "Aşağıdaki veritabanı bilgilerini KESIN KAYNAK olarak kullanarak kullanıcı sorusuna Türkçe ve öz "
                "bir yanıt yaz. Sadece verilen bilgilere dayan. Gerekirse kritik bilgileri vurgula."
            ),
        )

    async def top_items(self, turn: ChatTurn, match: IntentMatch) -> str:
        rows = await self.store.fetch_orders(turn.user_id, turn.date_range)
        result = aggregate(rows, "sum", group_by="item_name", limit=match.top_n or DEFAULT_TOP_N)
        if not result.rows:
            return NO_RECORDS_TEXT
        facts = _breakdown_lines(result, numbered=True)
        return await self.composer.compose(
            question=turn.question,
            facts=facts,
            fallback=f"En çok satan ürünler:\n{facts}",
            date_context=turn.date_context,
            facts_title="En çok satanlar",
            instruction=(
                "Aşağıdaki veritabanı bilgilerine dayanarak Türkçe ve öz bir yanıt yaz. "
                "Gerekirse kısa çıkarımlar yap, ama uydurma bilgi verme."
            ),
        )

    async def _breakdown(self, turn: ChatTurn, group_by: str, title: str, instruction: str) -> str:
        rows = await self.store.fetch_orders(turn.user_id, turn.date_range)
        # Dağılımda tüm gruplar gösterilir
        result = aggregate(rows, "sum", group_by=group_by, limit=len(rows) or 1)
        if not result.rows:
            return NO_RECORDS_TEXT
        facts = _breakdown_lines(result)
        return await self.composer.compose(
            question=turn.question,
            facts=facts,
            fallback=f"{title}:\n{facts}",
            date_context=turn.date_context,
            facts_title="Dağılım",
            instruction=instruction,
        )

    async def menu_groups(self, turn: ChatTurn, match: IntentMatch) -> str:
        return await self._breakdown(
            turn,
            "menu_group",
            "Menü grubu gelir dağılımı",
            "Aşağıdaki menü grubu gelir dağılımına dayanarak Türkçe ve öz bir yanıt yaz. Uydurma bilgi verme.",
        )

    async def service_types(self, turn: ChatTurn, match: IntentMatch) -> str:
        return await self._breakdown(
            turn,
            "service_type",
            "Servis türüne göre gelir",
            "Aşağıdaki servis türü gelirlerine dayanarak Türkçe ve öz bir yanıt yaz. Uydurma bilgi verme.",
        )
