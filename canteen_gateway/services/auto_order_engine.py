"""Recurring auto-order engine - batch runner and order materializer"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from canteen_gateway.config import settings
from canteen_gateway.domain.exceptions import (
    ConcurrentModificationError,
    StorageUnavailableError,
    UserNotFoundError,
)
from canteen_gateway.domain.models import (
    BatchRunSummary,
    CandidateOrder,
    ExecutionOutcome,
    LocalTime,
    OutcomeStatus,
)
from canteen_gateway.domain.money import format_rupees, to_amount
from canteen_gateway.domain.order_ids import generate_order_id
from canteen_gateway.domain.recurrence import already_ran_today, fires_today
from canteen_gateway.infrastructure.database.models import RecurringOrder
from canteen_gateway.infrastructure.database.repositories import (
    AutoOrderLedgerRepository,
    RecurringOrderRepository,
    UserRepository,
)
from canteen_gateway.infrastructure.database.session import check_connection
from canteen_gateway.infrastructure.observability.logging import log_batch_run
from canteen_gateway.infrastructure.observability.metrics import (
    record_batch,
    record_debit,
    transaction_retry_counter,
)
from canteen_gateway.utils.date_utils import resolve_local_time

logger = logging.getLogger(__name__)


class AutoOrderEngine:
    """
    Executes recurring orders due at the current local minute.

    Shared by the background scheduler and the on-demand trigger endpoint;
    neither path carries business logic of its own.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        max_transaction_attempts: Optional[int] = None,
        order_id_prefix: Optional[str] = None,
    ):
        self._session_factory = session_factory
        self.max_transaction_attempts = max_transaction_attempts or settings.max_transaction_attempts
        self.order_id_prefix = order_id_prefix or settings.order_id_prefix

    # -------------------------------------------------------------------------
    # Batch runner
    # -------------------------------------------------------------------------

    def run(
        self,
        now: Optional[datetime] = None,
        override_time: Optional[str] = None,
        trigger: str = "scheduler",
    ) -> BatchRunSummary:
        """
        Run one batch pass.

        Flow:
        1. Resolve local time/day/date once
        2. Query active recurring orders whose fire time equals the local time
           (or override_time, which replaces only the HH:MM part)
        3. Evaluate each candidate independently into an ExecutionOutcome
        4. Fold outcomes into a BatchRunSummary

        A database that cannot be reached fails the whole pass; anything that
        goes wrong with a single candidate is recorded against that candidate.
        """
        run_id = uuid.uuid4().hex[:8]
        start_time = time.time()
        now = now or datetime.now(timezone.utc)
        local = resolve_local_time(now)
        query_time = override_time or local.time

        logger.info(
            "Auto-order batch started",
            extra={
                "run_id": run_id,
                "trigger": trigger,
                "utc_time": now.isoformat(),
                "local_time": local.time,
                "local_day": local.weekday,
                "local_date": local.calendar_date,
            },
        )
        if override_time:
            logger.warning(
                f"Using override time {override_time} instead of {local.time}",
                extra={"run_id": run_id},
            )

        try:
            candidates = self._load_candidates(query_time)
        except (StorageUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Auto-order batch aborted: {e}", extra={"run_id": run_id})
            summary = BatchRunSummary(
                success=False,
                time=query_time,
                day=local.weekday,
                date=local.calendar_date,
                errors=[str(e)],
                message=str(e),
            )
            self._finish(run_id, summary, trigger, start_time)
            return summary

        outcomes = [self.process_candidate(candidate, now, local, run_id) for candidate in candidates]
        summary = summarize_outcomes(query_time, local, len(candidates), outcomes)
        if not candidates:
            summary.message = f"No active auto orders for {query_time} {settings.local_timezone_label}"

        self._finish(run_id, summary, trigger, start_time)
        return summary

    def process_candidate(
        self,
        candidate: CandidateOrder,
        now: datetime,
        local: LocalTime,
        run_id: str = "",
    ) -> ExecutionOutcome:
        """Decide and, when due, materialize one candidate; never raises"""
        log_extra = {"run_id": run_id, "auto_order_id": candidate.id, "user_id": candidate.user_id}
        try:
            if not fires_today(candidate.frequency, candidate.custom_days, local.weekday):
                logger.info(
                    f"Skipped: {candidate.frequency} rule not scheduled for {local.weekday}",
                    extra=log_extra,
                )
                return ExecutionOutcome.skipped(candidate.id, f"not scheduled for {local.weekday}")

            if already_ran_today(candidate.last_executed_date, local.calendar_date):
                logger.info(f"Skipped: already ran on {local.calendar_date}", extra=log_extra)
                return ExecutionOutcome.skipped(candidate.id, "already ran today")

            outcome = self.materialize(candidate, now, local)
            logger.info(
                f"Auto order {outcome.status.value}",
                extra={**log_extra, "reason": outcome.reason, "order_id": outcome.order_id},
            )
            return outcome

        except Exception as e:
            logger.exception(f"Auto order failed unexpectedly: {e}", extra=log_extra)
            return ExecutionOutcome.failed(candidate.id, str(e) or type(e).__name__)

    # -------------------------------------------------------------------------
    # Materializer
    # -------------------------------------------------------------------------

    def materialize(self, candidate: CandidateOrder, now: datetime, local: LocalTime) -> ExecutionOutcome:
        """
        Turn one eligible recurring order into an order inside one transaction.

        The transaction is retried from the read phase when a concurrent
        writer changed the user or the recurring order underneath it.

        Raises:
            ConcurrentModificationError: still conflicting after max_transaction_attempts
        """
        for attempt in range(1, self.max_transaction_attempts + 1):
            db = self._session_factory()
            try:
                outcome = self._materialize_once(db, candidate.id, now, local)
                db.commit()
            except StaleDataError:
                db.rollback()
                transaction_retry_counter.inc()
                logger.warning(
                    f"Concurrent write detected, retrying (attempt {attempt})",
                    extra={"auto_order_id": candidate.id},
                )
                continue
            except UserNotFoundError as e:
                db.rollback()
                logger.error(str(e), extra={"auto_order_id": candidate.id})
                return ExecutionOutcome.failed(candidate.id, "user not found")
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

            if outcome.status == OutcomeStatus.SUCCEEDED:
                record_debit(outcome.amount)
            return outcome

        raise ConcurrentModificationError(
            f"Gave up after {self.max_transaction_attempts} conflicting attempts"
        )

    def _materialize_once(self, db: Session, auto_order_id: str, now: datetime, local: LocalTime) -> ExecutionOutcome:
        recurring = RecurringOrderRepository(db).get_for_update(auto_order_id)

        # Re-checked under lock: an overlapping trigger may have won the race
        if recurring is None:
            return ExecutionOutcome.skipped(auto_order_id, "no longer exists")
        if recurring.status != "active":
            return ExecutionOutcome.skipped(auto_order_id, "not active")
        if already_ran_today(recurring.last_executed_date, local.calendar_date):
            return ExecutionOutcome.skipped(auto_order_id, "already ran today")

        users = UserRepository(db)
        user = users.get_for_update(recurring.user_id)
        if user is None:
            raise UserNotFoundError(f"User {recurring.user_id} not found")

        balance = to_amount(user.wallet_balance)
        total = to_amount(recurring.item_price * recurring.quantity)
        ledger = AutoOrderLedgerRepository(db)

        if balance < total:
            ledger.record_attempt(
                auto_order_id=recurring.id,
                user_id=recurring.user_id,
                executed_at=now,
                success=False,
                failure_reason=f"Insufficient balance: {format_rupees(balance)} < {format_rupees(total)}",
            )
            # Date stamp on failure too: one attempt per day
            recurring.last_executed_date = local.calendar_date
            recurring.last_executed_at = now
            recurring.last_failed_at = now
            recurring.last_failure_reason = (
                f"Insufficient balance ({format_rupees(balance)} available, {format_rupees(total)} needed)"
            )
            recurring.total_failures = RecurringOrder.total_failures + 1
            recurring.updated_at = now
            return ExecutionOutcome.failed(recurring.id, "insufficient balance")

        order_id = generate_order_id(self.order_id_prefix)
        users.debit_wallet(user, total)
        ledger.create_order(order_id, user, recurring, total, now)
        ledger.record_wallet_debit(
            user_id=recurring.user_id,
            amount=total,
            description=f"Auto Order #{order_id} — {recurring.item_name} x{recurring.quantity}",
            now=now,
        )
        ledger.create_notification(
            user_id=recurring.user_id,
            title="Auto Order Placed ✅",
            message=f"{recurring.item_name} x{recurring.quantity} ({format_rupees(total)}) placed automatically.",
            order_id=order_id,
            now=now,
        )
        ledger.record_attempt(
            auto_order_id=recurring.id,
            user_id=recurring.user_id,
            executed_at=now,
            success=True,
            order_id=order_id,
            amount_deducted=total,
        )
        recurring.last_executed_date = local.calendar_date
        recurring.last_executed_at = now
        recurring.total_executions = RecurringOrder.total_executions + 1
        recurring.updated_at = now
        return ExecutionOutcome.succeeded(recurring.id, order_id, total)

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _load_candidates(self, query_time: str) -> List[CandidateOrder]:
        db = self._session_factory()
        try:
            check_connection(db)
            return RecurringOrderRepository(db).find_due(query_time)
        finally:
            db.close()

    def _finish(self, run_id: str, summary: BatchRunSummary, trigger: str, start_time: float) -> None:
        duration = time.time() - start_time
        record_batch(summary, trigger, duration)
        log_batch_run(run_id, summary, duration * 1000)


def summarize_outcomes(
    query_time: str,
    local: LocalTime,
    candidates: int,
    outcomes: List[ExecutionOutcome],
) -> BatchRunSummary:
    """Fold per-candidate outcomes into the pass summary"""
    processed = [o for o in outcomes if o.status != OutcomeStatus.SKIPPED]
    failures = [o for o in processed if o.status == OutcomeStatus.FAILED]

    return BatchRunSummary(
        success=True,
        time=query_time,
        day=local.weekday,
        date=local.calendar_date,
        candidates=candidates,
        skipped=len(outcomes) - len(processed),
        processed=len(processed),
        succeeded=len(processed) - len(failures),
        failed=len(failures),
        errors=[f"{o.auto_order_id}: {o.reason}" for o in failures],
    )
