"""Prometheus metrics for provisionoor."""

import logging
import threading
from typing import Optional

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

logger = logging.getLogger(__name__)

DEFAULT_METRICS_PORT = 8009

# Directory metrics
operators_fetched = Gauge(
    "provisionoor_operators_fetched",
    "Operators returned by the last directory fetch",
)

committees_formed = Gauge(
    "provisionoor_committees_formed",
    "Committees formed in the last run",
)

directory_errors = Counter(
    "provisionoor_directory_errors_total",
    "Operator directory fetch errors",
    ["error_type"],
)

# Pipeline metrics
validator_outcomes = Counter(
    "provisionoor_validator_outcomes_total",
    "Per-validator provisioning outcomes",
    ["status"],
)

validators_skipped = Counter(
    "provisionoor_validators_skipped_total",
    "Validators skipped because they were already provisioned",
)

split_duration = Histogram(
    "provisionoor_split_duration_seconds",
    "Time spent decrypting, splitting and encrypting one validator key",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Chain RPC metrics
rpc_calls = Counter(
    "provisionoor_rpc_calls_total",
    "Execution JSON-RPC calls",
    ["method"],
)

rpc_latency = Histogram(
    "provisionoor_rpc_latency_seconds",
    "Execution JSON-RPC call latency",
    ["method"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

rpc_errors = Counter(
    "provisionoor_rpc_errors_total",
    "Execution JSON-RPC call errors",
    ["method", "error_type"],
)

_server_started = False
_server_lock = threading.Lock()


def start_metrics_server(port: int = DEFAULT_METRICS_PORT) -> bool:
    """Start the Prometheus metrics HTTP server.

    Returns:
        True if server started successfully, False if already running
    """
    global _server_started

    with _server_lock:
        if _server_started:
            logger.warning("Metrics server already running")
            return False

        try:
            start_http_server(port)
            _server_started = True
            logger.info(f"Prometheus metrics server started on port {port}")
            return True
        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False


def record_directory_error(error_type: str) -> None:
    directory_errors.labels(error_type=error_type).inc()


def record_outcome(status: str) -> None:
    """Record a terminal per-validator outcome."""
    validator_outcomes.labels(status=status).inc()


def record_rpc_call(method: str, latency: float, error: Optional[str] = None) -> None:
    """Record an execution JSON-RPC call.

    Args:
        method: JSON-RPC method name
        latency: Call latency in seconds
        error: Error type if call failed
    """
    rpc_calls.labels(method=method).inc()
    rpc_latency.labels(method=method).observe(latency)
    if error:
        rpc_errors.labels(method=method, error_type=error).inc()
