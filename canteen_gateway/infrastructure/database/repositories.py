"""Data access layer for users, catalog items and recurring orders"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from sqlalchemy.orm import Session
from canteen_gateway.infrastructure.database.models import (
    AutoOrderExecution,
    CustomerOrder,
    MenuItem,
    Notification,
    RecurringOrder,
    User,
    WalletTransaction,
)
from canteen_gateway.domain.models import CandidateOrder
from canteen_gateway.domain.money import to_amount


class UserRepository:
    """Repository for user accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_for_update(self, user_id: str) -> Optional[User]:
        """Fetch user and lock the row until the transaction ends"""
        return (
            self.db.query(User)
            .filter(User.id == user_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def debit_wallet(self, user: User, amount: Decimal) -> None:
        """Decrement balance server-side; the version check rejects stale reads"""
        user.wallet_balance = User.wallet_balance - amount


class MenuItemRepository:
    """Read-only access to the catalog"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, item_id: str) -> Optional[MenuItem]:
        return self.db.query(MenuItem).filter(MenuItem.id == item_id).first()


class RecurringOrderRepository:
    """Repository for recurring (auto) orders"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        item: MenuItem,
        quantity: int,
        time: str,
        frequency: str,
        custom_days: List[str],
        now: datetime,
    ) -> RecurringOrder:
        """Persist a new active recurring order with a price snapshot"""
        order = RecurringOrder(
            user_id=user_id,
            item_id=item.id,
            item_name=item.name,
            item_price=item.price,
            quantity=quantity,
            time=time,
            frequency=frequency,
            custom_days=custom_days if frequency == "custom" else [],
            status="active",
            total_executions=0,
            total_failures=0,
            created_at=now,
            updated_at=now,
        )
        self.db.add(order)
        self.db.flush()
        return order

    def get_by_id(self, order_id: str) -> Optional[RecurringOrder]:
        return self.db.query(RecurringOrder).filter(RecurringOrder.id == order_id).first()

    def get_for_update(self, order_id: str) -> Optional[RecurringOrder]:
        """Fetch fresh state and lock the row until the transaction ends"""
        return (
            self.db.query(RecurringOrder)
            .filter(RecurringOrder.id == order_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def list_by_user(self, user_id: str) -> List[RecurringOrder]:
        return (
            self.db.query(RecurringOrder)
            .filter(RecurringOrder.user_id == user_id)
            .order_by(RecurringOrder.time, RecurringOrder.created_at)
            .all()
        )

    def find_due(self, time: str) -> List[CandidateOrder]:
        """Active recurring orders whose fire time equals time exactly"""
        rows = (
            self.db.query(RecurringOrder)
            .filter(RecurringOrder.status == "active")
            .filter(RecurringOrder.time == time)
            .order_by(RecurringOrder.created_at)
            .all()
        )
        return [to_candidate(row) for row in rows]

    def delete(self, order: RecurringOrder) -> None:
        self.db.delete(order)
        self.db.flush()


class AutoOrderLedgerRepository:
    """Writes produced by one auto-order execution attempt"""

    def __init__(self, db: Session):
        self.db = db

    def record_attempt(
        self,
        auto_order_id: str,
        user_id: str,
        executed_at: datetime,
        success: bool,
        order_id: Optional[str] = None,
        amount_deducted: Optional[Decimal] = None,
        failure_reason: Optional[str] = None,
    ) -> AutoOrderExecution:
        execution = AutoOrderExecution(
            auto_order_id=auto_order_id,
            user_id=user_id,
            success=success,
            order_id=order_id,
            amount_deducted=amount_deducted,
            failure_reason=failure_reason,
            executed_at=executed_at,
        )
        self.db.add(execution)
        return execution

    def create_order(
        self,
        order_id: str,
        user: User,
        recurring: RecurringOrder,
        total: Decimal,
        now: datetime,
    ) -> CustomerOrder:
        """Single-line wallet order, pending fulfilment"""
        order = CustomerOrder(
            order_id=order_id,
            user_id=user.id,
            user_name=user.name or "Auto Order",
            user_email=user.email or "",
            user_roll_number=user.roll_number or "",
            items=[
                {
                    "id": recurring.item_id,
                    "name": recurring.item_name,
                    "price": str(to_amount(recurring.item_price)),
                    "quantity": recurring.quantity,
                }
            ],
            total=total,
            payment_mode="Wallet",
            status="pending",
            is_auto_order=True,
            auto_order_id=recurring.id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(order)
        return order

    def record_wallet_debit(self, user_id: str, amount: Decimal, description: str, now: datetime) -> WalletTransaction:
        txn = WalletTransaction(
            user_id=user_id,
            type="debit",
            amount=amount,
            description=description,
            created_at=now,
        )
        self.db.add(txn)
        return txn

    def create_notification(
        self,
        user_id: str,
        title: str,
        message: str,
        order_id: str,
        now: datetime,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type="auto_order",
            title=title,
            message=message,
            order_id=order_id,
            read=False,
            created_at=now,
        )
        self.db.add(notification)
        return notification


def to_candidate(row: RecurringOrder) -> CandidateOrder:
    """Deserialize a stored recurring order into the engine's record type"""
    custom_days: Any = row.custom_days
    return CandidateOrder(
        id=row.id,
        user_id=row.user_id,
        item_id=row.item_id,
        item_name=row.item_name,
        item_price=to_amount(row.item_price),
        quantity=int(row.quantity),
        time=row.time,
        frequency=row.frequency,
        custom_days=list(custom_days) if isinstance(custom_days, list) else [],
        status=row.status,
        last_executed_date=row.last_executed_date,
    )
