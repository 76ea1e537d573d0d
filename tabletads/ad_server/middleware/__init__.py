"""
Middleware for the edge server.
"""

from tabletads.ad_server.middleware.metrics import (
    MetricsMiddleware,
    metrics_endpoint,
    record_budget_charge,
    record_impression,
    record_playlist_request,
    record_store_latency,
)

__all__ = [
    "MetricsMiddleware",
    "metrics_endpoint",
    "record_playlist_request",
    "record_impression",
    "record_budget_charge",
    "record_store_latency",
]
