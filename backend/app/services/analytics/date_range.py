"""Kaba tarih aralığı ifadelerini somut takvim aralıklarına çevirir."""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Tuple


class RangeToken(str, Enum):
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    MONTH = "month"
    THIS_WEEK = "thisWeek"
    LAST_WEEK = "lastWeek"
    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_YEAR = "thisYear"
    LAST_MONTH = "lastMonth"
    NONE = "none"


@dataclass(frozen=True)
class DateRange:
    """Kapsayıcı tarih aralığı; eksik uç sınırsız demektir."""

    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def to_dict(self) -> dict:
        return {k: v for k, v in (("start", self.start), ("end", self.end)) if v is not None}


# Sıra önemli: ilk eşleşen kazanır. Metin normalize_query'den geçmiş olmalı.
_TOKEN_PATTERNS: List[Tuple[RangeToken, re.Pattern]] = [
    (RangeToken.LAST_7_DAYS, re.compile(r"son\s*7\s*gun")),
    (RangeToken.LAST_30_DAYS, re.compile(r"son\s*30\s*gun")),
    (RangeToken.MONTH, re.compile(r"\b(bu|ic)\s*ay")),
    (RangeToken.TODAY, re.compile(r"bugun")),
    (RangeToken.YESTERDAY, re.compile(r"\bdun")),
    (RangeToken.THIS_WEEK, re.compile(r"bu hafta")),
    (RangeToken.LAST_WEEK, re.compile(r"gecen\s*hafta")),
    (RangeToken.LAST_MONTH, re.compile(r"gecen\s*ay")),
    (RangeToken.THIS_YEAR, re.compile(r"bu (yil|sene)")),
]


def extract_range_token(normalized_text: str) -> RangeToken:
    for token, pattern in _TOKEN_PATTERNS:
        if pattern.search(normalized_text):
            return token
    return RangeToken.NONE


def _iso(d: date) -> str:
    return d.isoformat()


def _week_start(d: date) -> date:
    return d - timedelta(days=d.weekday())


def resolve(token: RangeToken, today: date) -> DateRange:
    """
    Aralık ifadesini `today` referansıyla çözer.

    RangeToken.NONE sınırsız aralık döner; çağıranlar bunu "tüm geçmiş" olarak yorumlar.
    """
    token = RangeToken(token)

    if token is RangeToken.NONE:
        return DateRange()
    if token is RangeToken.LAST_7_DAYS:
        return DateRange(_iso(today - timedelta(days=6)), _iso(today))
    if token is RangeToken.LAST_30_DAYS:
        return DateRange(_iso(today - timedelta(days=29)), _iso(today))
    if token is RangeToken.TODAY:
        return DateRange(_iso(today), _iso(today))
    if token is RangeToken.YESTERDAY:
        yesterday = today - timedelta(days=1)
        return DateRange(_iso(yesterday), _iso(yesterday))
    if token is RangeToken.THIS_WEEK:
        return DateRange(_iso(_week_start(today)), _iso(today))
    if token is RangeToken.LAST_WEEK:
        this_monday = _week_start(today)
        return DateRange(_iso(this_monday - timedelta(days=7)), _iso(this_monday - timedelta(days=1)))
    if token is RangeToken.LAST_MONTH:
        end_last_month = today.replace(day=1) - timedelta(days=1)
        return DateRange(_iso(end_last_month.replace(day=1)), _iso(end_last_month))
    if token is RangeToken.THIS_YEAR:
        return DateRange(_iso(today.replace(month=1, day=1)), _iso(today))
    # month
    return DateRange(_iso(today.replace(day=1)), _iso(today))


def one_month_ago(today: date) -> date:
    """Bir önceki ayın aynı günü; ay daha kısaysa ayın son günü."""
    first_this_month = today.replace(day=1)
    end_prev_month = first_this_month - timedelta(days=1)
    return end_prev_month.replace(day=min(today.day, end_prev_month.day))


TURKISH_WEEKDAYS = ["Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar"]


def date_context_line(today: date) -> str:
    return f"Bugünün tarihi: {today.isoformat()} ({TURKISH_WEEKDAYS[today.weekday()]})"
