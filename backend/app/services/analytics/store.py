"""Sipariş deposu: kullanıcıya ait sipariş satırları ve genel bağlam sorguları."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

from databases import Database

from .aggregation import OrderRecord
from .date_range import DateRange, one_month_ago
from .exceptions import StoreError

logger = logging.getLogger(__name__)

ORDER_COLUMNS = "user_id, amount, menu_group, service_type, item_name, order_date"


@dataclass(frozen=True)
class NamedCount:
    name: str
    count: int


@dataclass(frozen=True)
class FullContext:
    total_orders: int
    distinct_menu_groups: int
    distinct_items: int
    distinct_service_types: int
    most_ordered_item: Optional[NamedCount]
    last_month_top_menu_group: Optional[NamedCount]
    last_month_top_item: Optional[NamedCount]
    last_month_order_count: int
    has_high_volume_last_month: bool
    high_volume_threshold: int = 450

    def to_fact_lines(self) -> List[str]:
        def _named(nc: Optional[NamedCount]) -> str:
            return f"{nc.name if nc else '-'} ({nc.count if nc else 0} sipariş)"

        return [
            f"Toplam sipariş sayısı: {self.total_orders}",
            f"Farklı menü grubu: {self.distinct_menu_groups}",
            f"Farklı ürün: {self.distinct_items}",
            f"Farklı servis türü: {self.distinct_service_types}",
            f"En çok sipariş edilen ürün: {_named(self.most_ordered_item)}",
            f"Son 1 ay sipariş sayısı: {self.last_month_order_count}",
            f"Son 1 ayda en popüler menü grubu: {_named(self.last_month_top_menu_group)}",
            f"Son 1 ayda en popüler ürün: {_named(self.last_month_top_item)}",
            f"Son 1 ayda yüksek hacim (≥{self.high_volume_threshold} sipariş): "
            f"{'EVET' if self.has_high_volume_last_month else 'HAYIR'}",
        ]


class OrderStore(Protocol):
    async def fetch_orders(self, user_id: str, date_range: DateRange) -> List[OrderRecord]:
        ...

    async def fetch_full_context(self, user_id: str, today: date) -> FullContext:
        ...

    async def fetch_window(self, user_id: str) -> DateRange:
        ...


def _range_clause(date_range: DateRange, params: Dict[str, Any]) -> str:
    clause = ""
    if date_range.start:
        clause += " AND order_date >= :start"
        params["start"] = date.fromisoformat(date_range.start)
    if date_range.end:
        clause += " AND order_date <= :end"
        params["end"] = date.fromisoformat(date_range.end)
    return clause


def _mapping(row: Any) -> Mapping[str, Any]:
    return row._mapping if hasattr(row, "_mapping") else row


def _count(row: Any, column: str) -> int:
    if not row:
        return 0
    value = _mapping(row)[column]
    return int(value) if value is not None else 0


class DatabaseOrderStore:
    """`orders` tablosu üzerinden çalışan depo; satır sayısı `limit` ile sınırlıdır."""

    def __init__(self, database: Database, limit: int = 5000, high_volume_threshold: int = 450):
        self.db = database
        self.limit = limit
        self.high_volume_threshold = high_volume_threshold

    async def fetch_orders(self, user_id: str, date_range: DateRange) -> List[OrderRecord]:
        """Aralıktaki siparişler; sınır aşılırsa en yeni `limit` satır kalır."""
        params: Dict[str, Any] = {"uid": user_id, "limit": self.limit}
        query = (
            f"SELECT {ORDER_COLUMNS} FROM orders WHERE user_id = :uid"
            f"{_range_clause(date_range, params)} ORDER BY order_date DESC LIMIT :limit"
        )
        try:
            rows = await self.db.fetch_all(query, params)
        except Exception as e:
            raise StoreError(f"Sipariş sorgusu başarısız: {e}") from e
        return [OrderRecord.from_row(dict(_mapping(r))) for r in rows]

    async def _scalar(self, query: str, params: Dict[str, Any]) -> int:
        return _count(await self.db.fetch_one(query, params), "n")

    async def _top(self, column: str, params: Dict[str, Any], since: bool) -> Optional[NamedCount]:
        query = (
            f"SELECT {column} AS name, COUNT(*) AS cnt FROM orders WHERE user_id = :uid"
            f"{' AND order_date >= :since' if since else ''} "
            f"GROUP BY {column} ORDER BY cnt DESC LIMIT 1"
        )
        row = await self.db.fetch_one(query, params)
        if not row:
            return None
        data = _mapping(row)
        return NamedCount(name=str(data["name"]), count=int(data["cnt"]))

    async def _distinct_counts(self, params: Dict[str, Any]) -> Tuple[int, int, int]:
        row = await self.db.fetch_one(
            """
            SELECT
                COUNT(DISTINCT menu_group) AS menu_groups,
                COUNT(DISTINCT item_name) AS items,
                COUNT(DISTINCT service_type) AS service_types
            FROM orders
            WHERE user_id = :uid
            """,
            params,
        )
        return _count(row, "menu_groups"), _count(row, "items"), _count(row, "service_types")

    async def fetch_full_context(self, user_id: str, today: date) -> FullContext:
        base = {"uid": user_id}
        recent = {"uid": user_id, "since": one_month_ago(today)}

        # Bağımsız sorgular eşzamanlı çalışır; biri düşse de hepsi tamamlanıp toplanır
        results = await asyncio.gather(
            self._scalar("SELECT COUNT(*) AS n FROM orders WHERE user_id = :uid", base),
            self._distinct_counts(base),
            self._top("item_name", base, since=False),
            self._top("menu_group", recent, since=True),
            self._top("item_name", recent, since=True),
            self._scalar("SELECT COUNT(*) AS n FROM orders WHERE user_id = :uid AND order_date >= :since", recent),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            if len(failures) > 1:
                logger.warning(f"[STORE] Bağlam sorgularından {len(failures)} tanesi başarısız")
            raise StoreError(f"Bağlam sorgusu başarısız: {failures[0]}") from failures[0]

        (
            total_orders,
            (menu_groups, items, service_types),
            most_ordered_item,
            last_month_top_menu_group,
            last_month_top_item,
            last_month_order_count,
        ) = results
        return FullContext(
            total_orders=total_orders,
            distinct_menu_groups=menu_groups,
            distinct_items=items,
            distinct_service_types=service_types,
            most_ordered_item=most_ordered_item,
            last_month_top_menu_group=last_month_top_menu_group,
            last_month_top_item=last_month_top_item,
            last_month_order_count=last_month_order_count,
            has_high_volume_last_month=last_month_order_count >= self.high_volume_threshold,
            high_volume_threshold=self.high_volume_threshold,
        )

    async def fetch_window(self, user_id: str) -> DateRange:
        try:
            row = await self.db.fetch_one(
                "SELECT MIN(order_date) AS first_date, MAX(order_date) AS last_date FROM orders WHERE user_id = :uid",
                {"uid": user_id},
            )
        except Exception as e:
            raise StoreError(f"Tarih aralığı sorgusu başarısız: {e}") from e
        data = _mapping(row) if row else None
        if not data or data["first_date"] is None:
            return DateRange()
        return DateRange(start=str(data["first_date"])[:10], end=str(data["last_date"])[:10])
