"""Unit tests for folding per-candidate outcomes into a batch summary"""

from decimal import Decimal
from canteen_gateway.domain.models import ExecutionOutcome, LocalTime
from canteen_gateway.services.auto_order_engine import summarize_outcomes

LOCAL = LocalTime(time="08:00", weekday="Mon", calendar_date="2024-01-01")


def test_summarize_empty_batch():
    """No candidates: successful pass with all-zero counts"""
    summary = summarize_outcomes("08:00", LOCAL, 0, [])

    assert summary.success is True
    assert (summary.candidates, summary.skipped, summary.processed, summary.succeeded, summary.failed) == (0, 0, 0, 0, 0)
    assert summary.errors == []


def test_summarize_mixed_outcomes():
    """Skipped items are not processed; failures become error strings"""
    outcomes = [
        ExecutionOutcome.succeeded("ao_1", "SAITM4F7X", Decimal("100.00")),
        ExecutionOutcome.failed("ao_2", "insufficient balance"),
        ExecutionOutcome.skipped("ao_3", "not scheduled for Mon"),
        ExecutionOutcome.failed("ao_4", "user not found"),
        ExecutionOutcome.skipped("ao_5", "already ran today"),
    ]

    summary = summarize_outcomes("08:00", LOCAL, 5, outcomes)

    assert summary.time == "08:00"
    assert summary.day == "Mon"
    assert summary.date == "2024-01-01"
    assert summary.candidates == 5
    assert summary.skipped == 2
    assert summary.processed == 3
    assert summary.succeeded == 1
    assert summary.failed == 2
    assert summary.errors == ["ao_2: insufficient balance", "ao_4: user not found"]
