"""
Aggregation component - grouped counts, sums and KPIs.
"""

from ._aggregate import (
    average_ticket,
    completion_rate,
    compute_kpis,
    count_by_status,
    count_by_type,
    count_by_unit,
    median_resolution_days,
    status_summary,
    sum_by_category,
    sum_by_month,
    sum_by_unit,
    to_buckets,
    total_spend,
)
from .models import Bucket, Kpis, StatusSummary

__all__ = [
    "Bucket",
    "Kpis",
    "StatusSummary",
    "average_ticket",
    "completion_rate",
    "compute_kpis",
    "count_by_status",
    "count_by_type",
    "count_by_unit",
    "median_resolution_days",
    "status_summary",
    "sum_by_category",
    "sum_by_month",
    "sum_by_unit",
    "to_buckets",
    "total_spend",
]
