"""
Trade Analytics
===============

  metrics.py - dashboard metrics engine (pure functions)
  filters.py - date-range, entry-model and news filters
  edge.py    - edge statistics, trading calendar, CSV export
"""

from tradejournal.analytics.metrics import DashboardMetrics, compute_metrics, format_metrics
from tradejournal.analytics.edge import EdgeStats, compute_edge_stats

__all__ = [
    "DashboardMetrics", "compute_metrics", "format_metrics",
    "EdgeStats", "compute_edge_stats",
]
