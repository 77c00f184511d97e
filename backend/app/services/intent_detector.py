"""Normalize edilmiş soru metninden analitik niyet tespiti."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

logger = logging.getLogger("intent_detector")

DEFAULT_TOP_N = 5
MAX_TOP_N = 20


class Intent(str, Enum):
    LATEST = "latest"
    SUMMARY = "summary"
    TOP_ITEMS = "topItems"
    MENU_GROUP = "menuGroup"
    SERVICE_TYPE = "serviceType"
    NONE = "none"


# Öncelik sırası: ilk eşleşen kazanır. "latest" özet diliyle birlikte geçebilir, önce gelmeli.
INTENT_PATTERNS: List[Tuple[Intent, re.Pattern]] = [
    (Intent.LATEST, re.compile(r"(en son|son veri|son kayit|son gun|last|latest)")),
    (Intent.SUMMARY, re.compile(r"(gelir|ciro|ozet|kpi|toplam|ortalama|kazanc|hasilat)")),
    (Intent.TOP_ITEMS, re.compile(r"(en cok satan|top ?\d+|en cok|populer|en iyi)")),
    (Intent.MENU_GROUP, re.compile(r"(menu grubu|kategori)")),
    (Intent.SERVICE_TYPE, re.compile(r"(servis tur|paket|yerinde)")),
]

_TOP_N_RE = re.compile(r"top\s*(\d+)")


@dataclass(frozen=True)
class IntentMatch:
    intent: Intent
    top_n: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.intent is not Intent.NONE


def extract_top_n(normalized_text: str) -> int:
    m = _TOP_N_RE.search(normalized_text)
    value = int(m.group(1)) if m else DEFAULT_TOP_N
    return max(1, min(MAX_TOP_N, value))


def detect_intent(normalized_text: str) -> IntentMatch:
    """Metin `normalize_query` çıktısı olmalı (küçük harf, Türkçe harfler katlanmış)."""
    for intent, pattern in INTENT_PATTERNS:
        if pattern.search(normalized_text):
            top_n = extract_top_n(normalized_text) if intent is Intent.TOP_ITEMS else None
            logger.info("intent_detected", extra={"intent": intent.value, "top_n": top_n})
            return IntentMatch(intent=intent, top_n=top_n)
    return IntentMatch(intent=Intent.NONE)
