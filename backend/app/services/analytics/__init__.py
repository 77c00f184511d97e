"""Sipariş analitiği paketi.

Doğal dil sorularını tarih aralığı çözümleme, niyet işleyicileri ve
yapılandırılmış sorgu belirtimi (QuerySpec) üzerinden bellekteki
toplama motoruna bağlar.
"""
from .aggregation import OrderRecord, QueryFilters, QueryResult, ResultRow, aggregate
from .date_range import DateRange, RangeToken, extract_range_token, resolve
from .exceptions import AnalyticsError, QuerySpecError, StoreError
from .query_spec import QuerySpec, parse_query_spec
from .store import DatabaseOrderStore, FullContext, OrderStore

__all__ = [
    "AnalyticsError",
    "DatabaseOrderStore",
    "DateRange",
    "FullContext",
    "OrderRecord",
    "OrderStore",
    "QueryFilters",
    "QueryResult",
    "QuerySpec",
    "QuerySpecError",
    "RangeToken",
    "ResultRow",
    "StoreError",
    "aggregate",
    "extract_range_token",
    "parse_query_spec",
    "resolve",
]
