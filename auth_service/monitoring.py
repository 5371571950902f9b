"""Prometheus metrics instrumentation."""

from prometheus_fastapi_instrumentator import Instrumentator
from fastapi import FastAPI


def setup_monitoring(app: FastAPI) -> None:
    """Instrument the app and expose /metrics when ENABLE_METRICS is true."""
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        excluded_handlers=["/metrics", "/health"],
        env_var_name="ENABLE_METRICS",
    )
    instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
