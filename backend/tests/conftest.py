# backend/tests/conftest.py
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Backend path'i ekle
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import AssistantConfig
from app.services.analytics.aggregation import OrderRecord
from app.services.analytics.date_range import DateRange
from app.services.analytics.store import FullContext, NamedCount

TODAY = date(2024, 6, 15)  # Cumartesi
USER = "u-1"
MODELS = ("model-a", "model-b")


def order(order_date, amount, item="Lahmacun", menu_group="Ana Yemek", service_type="Yerinde", user_id=USER):
    return OrderRecord(
        user_id=user_id,
        amount=Decimal(str(amount)),
        menu_group=menu_group,
        service_type=service_type,
        item_name=item,
        order_date=order_date,
    )


class FakeOrderStore:
    """Bellekteki satırlar üzerinde OrderStore; aralık ve kullanıcı filtresi uygular."""

    def __init__(self, rows=None, context=None, error=None):
        self.rows = list(rows or [])
        self.context = context
        self.error = error
        self.requested_ranges = []

    async def fetch_orders(self, user_id, date_range):
        if self.error is not None:
            raise self.error
        self.requested_ranges.append(date_range)
        return [
            r
            for r in self.rows
            if r.user_id == user_id
            and (date_range.start is None or r.order_date >= date_range.start)
            and (date_range.end is None or r.order_date <= date_range.end)
        ]

    async def fetch_full_context(self, user_id, today):
        if self.context is None:
            raise RuntimeError("context unavailable")
        return self.context

    async def fetch_window(self, user_id):
        dates = [r.order_date for r in self.rows if r.user_id == user_id]
        if not dates:
            return DateRange()
        return DateRange(start=min(dates), end=max(dates))


class FakeProvider:
    """
    Senaryolu model sağlayıcısı.

    by_model: model kimliğine göre sabit yanıt/hata.
    script: sırayla tüketilen yanıtlar/hatalar; bitince `default` döner.
    """

    def __init__(self, script=None, by_model=None, default=""):
        self.script = list(script or [])
        self.by_model = dict(by_model or {})
        self.default = default
        self.calls = []
        self.closed = False

    async def generate(self, model_id, prompt):
        self.calls.append((model_id, prompt))
        if model_id in self.by_model:
            item = self.by_model[model_id]
        elif self.script:
            item = self.script.pop(0)
        else:
            item = self.default
        if isinstance(item, Exception):
            raise item
        return item

    async def aclose(self):
        self.closed = True


@pytest.fixture
def assistant_config():
    return AssistantConfig(api_key="test-key-1234", model_candidates=MODELS)


@pytest.fixture
def two_day_rows():
    return [order("2024-06-01", 100), order("2024-06-02", 50, item="Ayran", menu_group="İçecek")]


@pytest.fixture
def full_context():
    return FullContext(
        total_orders=520,
        distinct_menu_groups=4,
        distinct_items=18,
        distinct_service_types=2,
        most_ordered_item=NamedCount("Lahmacun", 140),
        last_month_top_menu_group=NamedCount("Ana Yemek", 300),
        last_month_top_item=NamedCount("Lahmacun", 90),
        last_month_order_count=460,
        has_high_volume_last_month=True,
    )
