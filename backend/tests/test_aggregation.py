from datetime import datetime
from decimal import Decimal

import pytest

from app.services.analytics.aggregation import (
    OrderRecord,
    QueryFilters,
    aggregate,
    compute_metric,
    latest_day_stats,
)
from conftest import order


def test_ungrouped_sum_avg_count(two_day_rows):
    assert aggregate(two_day_rows, "sum").rows[0].value == Decimal("150.00")
    assert aggregate(two_day_rows, "avg").rows[0].value == Decimal("75.00")
    assert aggregate(two_day_rows, "count").rows[0].value == 2


def test_ungrouped_always_single_row_even_when_empty():
    result = aggregate([], "avg")
    assert len(result.rows) == 1
    assert result.rows[0].key is None
    assert result.rows[0].value == Decimal("0.00")
    assert aggregate([], "count").rows[0].value == 0


def test_rounding_is_half_up():
    assert compute_metric([order("2024-06-01", "0.125")], "sum") == Decimal("0.13")
    assert compute_metric([order("2024-06-01", 1), order("2024-06-01", 2)], "avg") == Decimal("1.50")


def test_grouped_descending_with_stable_ties():
    rows = [
        order("2024-06-01", 10, item="Ayran"),
        order("2024-06-01", 20, item="Künefe"),
        order("2024-06-02", 10, item="Çay"),
    ]
    result = aggregate(rows, "sum", group_by="item_name")
    assert [(r.key, r.value) for r in result.rows] == [
        ("Künefe", Decimal("20.00")),
        ("Ayran", Decimal("10.00")),
        ("Çay", Decimal("10.00")),
    ]


def test_group_by_day_and_limit():
    rows = [order("2024-06-01", 5), order("2024-06-01", 5), order("2024-06-02", 1), order("2024-06-03", 1)]
    result = aggregate(rows, "count", group_by="day", limit=2)
    assert [r.key for r in result.rows] == ["2024-06-01", "2024-06-02"]
    assert result.rows[0].value == 2


def test_filters_are_exact_matches():
    rows = [
        order("2024-06-01", 100, service_type="Paket"),
        order("2024-06-01", 40, service_type="Yerinde"),
        order("2024-06-01", 60, service_type="Paket", menu_group="Tatlı"),
    ]
    result = aggregate(rows, "sum", filters=QueryFilters(service_type="Paket", menu_group="Ana Yemek"))
    assert result.rows[0].value == Decimal("100.00")


def test_input_rows_not_modified(two_day_rows):
    before = list(two_day_rows)
    aggregate(two_day_rows, "sum", group_by="menu_group", filters=QueryFilters(menu_group="İçecek"))
    assert two_day_rows == before


@pytest.mark.parametrize("metric,group_by", [("median", "none"), ("sum", "table")])
def test_invalid_metric_or_group_by(metric, group_by):
    with pytest.raises(ValueError):
        aggregate([], metric, group_by=group_by)


def test_result_to_dict():
    rows = [order("2024-06-01", 12.5, item="Ayran")]
    assert aggregate(rows, "sum", group_by="item_name").to_dict() == {
        "rows": [{"key": "Ayran", "value": 12.5}],
        "unit": "amount",
        "metric": "sum",
        "groupBy": "item_name",
    }
    assert aggregate(rows, "count").to_dict()["rows"] == [{"value": 1}]


def test_latest_day_stats(two_day_rows):
    stats = latest_day_stats(two_day_rows + [order("2024-06-02", 25)])
    assert stats == {"date": "2024-06-02", "count": 2, "total_revenue": Decimal("75.00")}
    assert latest_day_stats([]) is None


def test_order_record_from_row():
    record = OrderRecord.from_row(
        {
            "user_id": "u-1",
            "amount": 19.9,
            "menu_group": "Tatlı",
            "service_type": None,
            "item_name": "Künefe",
            "order_date": datetime(2024, 6, 1, 21, 30),
        }
    )
    assert record.amount == Decimal("19.9")
    assert record.order_date == "2024-06-01"
    assert record.service_type == ""


def test_grouped_sums_add_up_to_total():
    rows = [
        order("2024-06-01", "12.40", menu_group="Tatlı"),
        order("2024-06-02", "7.35", menu_group="İçecek"),
        order("2024-06-02", "30.10", menu_group="Ana Yemek"),
        order("2024-06-03", "4.15", menu_group="Tatlı"),
    ]
    total = aggregate(rows, "sum").rows[0].value
    per_group = aggregate(rows, "sum", group_by="menu_group").rows
    assert sum(r.value for r in per_group) == total == Decimal("54.00")
