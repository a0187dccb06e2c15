"""Prometheus metrics for monitoring auto-order runs, wallet debits and HTTP latency"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

from canteen_gateway.domain.models import BatchRunSummary

# Batch metrics
batch_run_counter = Counter(
    "canteen_auto_order_batch_total",
    "Auto-order batch passes",
    ["outcome", "trigger"],  # ok | fatal, scheduler | on_demand
)

batch_duration_histogram = Histogram(
    "canteen_auto_order_batch_duration_seconds",
    "Auto-order batch pass duration",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Per-item metrics
execution_counter = Counter(
    "canteen_auto_order_execution_total",
    "Auto-order candidates by outcome",
    ["outcome"],  # succeeded | failed | skipped
)

wallet_debit_counter = Counter(
    "canteen_wallet_debit_rupees_total",
    "Rupees debited from wallets by auto orders",
)

transaction_retry_counter = Counter(
    "canteen_auto_order_transaction_retries_total",
    "Materializer transactions retried after a concurrent write",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_batch(summary: BatchRunSummary, trigger: str, duration_seconds: float) -> None:
    """Record one batch pass"""
    batch_run_counter.labels(outcome="ok" if summary.success else "fatal", trigger=trigger).inc()
    batch_duration_histogram.observe(duration_seconds)

    if summary.skipped:
        execution_counter.labels(outcome="skipped").inc(summary.skipped)
    if summary.succeeded:
        execution_counter.labels(outcome="succeeded").inc(summary.succeeded)
    if summary.failed:
        execution_counter.labels(outcome="failed").inc(summary.failed)


def record_debit(amount: Decimal) -> None:
    wallet_debit_counter.inc(float(amount))
