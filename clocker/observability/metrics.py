"""
Prometheus metrics configuration for clocker.
"""
import os
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator


refreshes_total = Counter(
    "clocker_refreshes_total",
    "Total number of refresh cycles by outcome",
    ["outcome"],
)

clock_actions_total = Counter(
    "clocker_clock_actions_total",
    "Total number of clock in/out calls sent to BambooHR",
    ["action", "outcome"],
)

reconcile_anomalies_total = Counter(
    "clocker_reconcile_anomalies_total",
    "Total number of anomalies seen while reconciling entries",
    ["anomaly"],
)


def setup_metrics(app):
    """
    Expose HTTP and clocker metrics on /metrics.
    Only enabled when the METRICS_ENABLED environment variable is true.

    Args:
        app: FastAPI application instance
    """
    metrics_enabled = os.getenv("METRICS_ENABLED", "").lower() in ("true", "1", "yes")

    if not metrics_enabled:
        return

    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=False,
        should_respect_env_var=False,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.instrument(app).expose(app, include_in_schema=True, tags=["observability"])
