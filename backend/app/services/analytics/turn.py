from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .date_range import DateRange


@dataclass(frozen=True)
class ChatTurn:
    """Tek bir sohbet isteğinin çözümlenmiş girdileri; istek boyunca değişmez."""

    question: str  # kullanıcının son mesajı, olduğu gibi
    normalized: str
    today: date
    date_context: str
    date_range: DateRange
    prompt: str  # tarih satırı + sistem metni + transkript (genel yedek için)
    user_id: Optional[str] = None
