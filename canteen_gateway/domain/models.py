"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional


@dataclass(frozen=True)
class LocalTime:
    """Wall-clock view of an instant in the canteen's fixed offset"""

    time: str  # "HH:MM"
    weekday: str  # "Mon".."Sun"
    calendar_date: str  # "YYYY-MM-DD"


@dataclass(frozen=True)
class CandidateOrder:
    """Recurring order as read by the batch runner"""

    id: str
    user_id: str
    item_id: str
    item_name: str
    item_price: Decimal
    quantity: int
    time: str
    frequency: str  # "daily" | "weekdays" | "custom"
    custom_days: List[str]
    status: str  # "active" | "paused"
    last_executed_date: Optional[str]


class OutcomeStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of considering one candidate in a batch pass"""

    auto_order_id: str
    status: OutcomeStatus
    reason: Optional[str] = None
    order_id: Optional[str] = None
    amount: Optional[Decimal] = None

    @classmethod
    def succeeded(cls, auto_order_id: str, order_id: str, amount: Decimal) -> "ExecutionOutcome":
        return cls(auto_order_id, OutcomeStatus.SUCCEEDED, order_id=order_id, amount=amount)

    @classmethod
    def failed(cls, auto_order_id: str, reason: str) -> "ExecutionOutcome":
        return cls(auto_order_id, OutcomeStatus.FAILED, reason=reason)

    @classmethod
    def skipped(cls, auto_order_id: str, reason: str) -> "ExecutionOutcome":
        return cls(auto_order_id, OutcomeStatus.SKIPPED, reason=reason)


@dataclass
class BatchRunSummary:
    """Aggregated result of one batch pass; never persisted"""

    success: bool
    time: str
    day: str
    date: str
    candidates: int = 0
    skipped: int = 0
    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    message: Optional[str] = None

