"""Analitik katmanına özel hatalar."""
from __future__ import annotations


class AnalyticsError(RuntimeError):
    """Analitik sürecinde meydana gelen genel hata."""


class StoreError(AnalyticsError):
    """Sipariş deposuna erişilemediğinde veya sorgu başarısız olduğunda fırlatılır."""


class QuerySpecError(AnalyticsError):
    """Modelin ürettiği sorgu belirtimi çözümlenemediğinde veya doğrulanamadığında fırlatılır."""
