"""
Prometheus metrics middleware for monitoring.

Provides:
- Request latency histograms
- Request counters by endpoint
- Active request gauge
- Business metrics (playlists served, impressions, budget charged)
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from tabletads import __version__
from tabletads.common.logger import get_logger

logger = get_logger(__name__)

# =============================================================================
# Prometheus Metrics Definitions
# =============================================================================

APP_INFO = Info("tabletads_app", "tabletads application information")
APP_INFO.info({
    "version": __version__,
    "name": "tabletads",
    "description": "In-vehicle tablet ad delivery",
})

# HTTP request metrics
HTTP_REQUEST_TOTAL = Counter(
    "tabletads_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

HTTP_REQUEST_DURATION = Histogram(
    "tabletads_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "tabletads_http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method", "endpoint"],
)

# Playlist metrics
PLAYLIST_REQUESTS_TOTAL = Counter(
    "tabletads_playlist_requests_total",
    "Total playlist requests",
    ["status"],
)

PLAYLIST_SIZE = Histogram(
    "tabletads_playlist_size",
    "Number of ads per served playlist",
    buckets=(0, 1, 2, 5, 10, 20, 50),
)

PLAYLIST_DROPPED_TOTAL = Counter(
    "tabletads_playlist_dropped_total",
    "Candidate ads dropped for lack of a media URL",
)

# Impression metrics
IMPRESSIONS_TOTAL = Counter(
    "tabletads_impressions_total",
    "Impression reports by outcome",
    ["outcome"],
)

BUDGET_CHARGED_TOTAL = Counter(
    "tabletads_budget_charged_total",
    "Sum of per-view costs added to campaign budgets",
)

# Store metrics
STORE_CALL_LATENCY = Histogram(
    "tabletads_store_call_latency_seconds",
    "Data store call latency",
    ["operation"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)


# =============================================================================
# Metrics Middleware
# =============================================================================

class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware that collects Prometheus metrics for all HTTP requests.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request and record metrics."""
        method = request.method
        endpoint = request.url.path

        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            logger.error("Request error", error=str(e))
            raise
        finally:
            duration = time.perf_counter() - start_time

            HTTP_REQUEST_TOTAL.labels(
                method=method,
                endpoint=endpoint,
                status=str(status_code),
            ).inc()

            HTTP_REQUEST_DURATION.labels(
                method=method,
                endpoint=endpoint,
            ).observe(duration)

            HTTP_REQUESTS_IN_PROGRESS.labels(
                method=method,
                endpoint=endpoint,
            ).dec()


# =============================================================================
# Metrics Endpoint
# =============================================================================

async def metrics_endpoint() -> StarletteResponse:
    """Prometheus metrics endpoint."""
    return StarletteResponse(
        content=generate_latest(),
        media_type="text/plain; charset=utf-8",
    )


# =============================================================================
# Helper Functions for Recording Business Metrics
# =============================================================================

def record_playlist_request(success: bool, size: int = 0, dropped: int = 0) -> None:
    """Record a playlist request and, when served, its size."""
    PLAYLIST_REQUESTS_TOTAL.labels(status="success" if success else "error").inc()
    if success:
        PLAYLIST_SIZE.observe(size)
        if dropped:
            PLAYLIST_DROPPED_TOTAL.inc(dropped)


def record_impression(outcome: str) -> None:
    """Record an impression report outcome (recorded/insert_failed/error)."""
    IMPRESSIONS_TOTAL.labels(outcome=outcome).inc()


def record_budget_charge(amount: float) -> None:
    """Record an amount added to a campaign's consumed budget."""
    BUDGET_CHARGED_TOTAL.inc(amount)


def record_store_latency(operation: str, duration: float) -> None:
    """Record data store call latency."""
    STORE_CALL_LATENCY.labels(operation=operation).observe(duration)
