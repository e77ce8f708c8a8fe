"""Prometheus metrics helpers for the dashboard."""
from prometheus_client import Counter, Histogram, Gauge, Info, generate_latest, CONTENT_TYPE_LATEST
from functools import wraps
import time


# ============================================
# Poller Metrics
# ============================================

FETCH_ERRORS = Counter(
    'poller_fetch_errors_total',
    'Total number of market API fetch errors',
    ['endpoint']
)

FETCH_LATENCY = Histogram(
    'poller_fetch_latency_seconds',
    'Time to fetch data from the market API',
    ['endpoint'],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

POLL_CYCLES = Counter(
    'poller_cycles_total',
    'Total number of completed price polls'
)

STALE_RESULTS_DISCARDED = Counter(
    'poller_stale_results_discarded_total',
    'Fetch results dropped because the poller was restarted or stopped',
    ['endpoint']
)


# ============================================
# Evaluator Metrics
# ============================================

ALERTS_TRIGGERED = Counter(
    'evaluator_alerts_triggered_total',
    'Total number of alerts triggered',
    ['condition']
)

ACTIVE_ALERTS = Gauge(
    'evaluator_active_alerts',
    'Number of active alerts for the current user'
)


# ============================================
# Shared Metrics
# ============================================

SERVICE_INFO = Info(
    'service',
    'Service information'
)


def track_latency(histogram: Histogram, labels: dict = None):
    """Decorator to track function execution latency."""
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return await func(*args, **kwargs)
            finally:
                duration = time.time() - start_time
                if labels:
                    histogram.labels(**labels).observe(duration)
                else:
                    histogram.observe(duration)
        return wrapper
    return decorator


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
