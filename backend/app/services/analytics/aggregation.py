"""Bellekteki sipariş satırları üzerinde gruplama ve metrik hesaplama."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Union

Metric = Literal["sum", "avg", "count"]
GroupBy = Literal["none", "day", "menu_group", "service_type", "item_name"]
Number = Union[int, Decimal]

METRICS = ("sum", "avg", "count")
GROUP_BY_VALUES = ("none", "day", "menu_group", "service_type", "item_name")

_TWO_PLACES = Decimal("0.01")


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _to_date_str(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


@dataclass(frozen=True)
class OrderRecord:
    user_id: str
    amount: Decimal
    menu_group: str
    service_type: str
    item_name: str
    order_date: str  # YYYY-MM-DD

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "OrderRecord":
        return cls(
            user_id=str(row.get("user_id") or ""),
            amount=_to_decimal(row.get("amount")),
            menu_group=str(row.get("menu_group") or ""),
            service_type=str(row.get("service_type") or ""),
            item_name=str(row.get("item_name") or ""),
            order_date=_to_date_str(row.get("order_date")),
        )


@dataclass(frozen=True)
class QueryFilters:
    menu_group: Optional[str] = None
    item_name: Optional[str] = None
    service_type: Optional[str] = None

    def matches(self, row: OrderRecord) -> bool:
        if self.menu_group and row.menu_group != self.menu_group:
            return False
        if self.item_name and row.item_name != self.item_name:
            return False
        if self.service_type and row.service_type != self.service_type:
            return False
        return True


@dataclass(frozen=True)
class ResultRow:
    value: Number
    key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        value = self.value if isinstance(self.value, int) else float(self.value)
        if self.key is None:
            return {"value": value}
        return {"key": self.key, "value": value}


@dataclass
class QueryResult:
    rows: List[ResultRow]
    metric: str
    group_by: str
    unit: str = "amount"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "unit": self.unit,
            "metric": self.metric,
            "groupBy": self.group_by,
        }


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_metric(rows: Sequence[OrderRecord], metric: str, field_name: str = "amount") -> Number:
    if metric == "count":
        return len(rows)
    total = sum((_to_decimal(getattr(r, field_name)) for r in rows), Decimal("0"))
    if metric == "sum":
        return _round2(total)
    if metric == "avg":
        if not rows:
            return _round2(Decimal("0"))
        return _round2(total / len(rows))
    raise ValueError(f"Desteklenmeyen metrik: {metric}")


def _group_key(row: OrderRecord, group_by: str) -> str:
    if group_by == "day":
        return row.order_date
    return getattr(row, group_by)


def aggregate(
    rows: Iterable[OrderRecord],
    metric: str,
    field_name: str = "amount",
    group_by: str = "none",
    filters: Optional[QueryFilters] = None,
    limit: int = 20,
) -> QueryResult:
    """
    Satırları filtreleyip metrik hesaplar.

    group_by="none" daima tek satır döner (anahtarsız). Gruplu sonuçlar değere göre
    azalan sırada, eşitlikte ilk görülme sırasıyla gelir ve `limit` kadar kesilir.
    Girdi satırları değiştirilmez.
    """
    if metric not in METRICS:
        raise ValueError(f"Desteklenmeyen metrik: {metric}")
    if group_by not in GROUP_BY_VALUES:
        raise ValueError(f"Desteklenmeyen gruplama: {group_by}")

    filters = filters or QueryFilters()
    filtered = [r for r in rows if filters.matches(r)]

    if group_by == "none":
        value = compute_metric(filtered, metric, field_name)
        return QueryResult(rows=[ResultRow(value=value)], metric=metric, group_by=group_by, unit=field_name)

    # dict ekleme sırası = ilk görülme sırası; sorted() kararlı olduğu için eşitlikte korunur
    partitions: Dict[str, List[OrderRecord]] = {}
    for row in filtered:
        partitions.setdefault(_group_key(row, group_by), []).append(row)

    entries = [ResultRow(key=k, value=compute_metric(v, metric, field_name)) for k, v in partitions.items()]
    entries = sorted(entries, key=lambda e: e.value, reverse=True)
    return QueryResult(rows=entries[: max(0, limit)], metric=metric, group_by=group_by, unit=field_name)


def latest_day_stats(rows: Sequence[OrderRecord]) -> Optional[Dict[str, Any]]:
    """En son sipariş gününün tarihi, sipariş sayısı ve geliri; satır yoksa None."""
    if not rows:
        return None
    last_date = max(r.order_date for r in rows)
    same_day = [r for r in rows if r.order_date == last_date]
    return {
        "date": last_date,
        "count": len(same_day),
        "total_revenue": compute_metric(same_day, "sum"),
    }
