"""SQLAlchemy ORM models for users, catalog, recurring orders and their side effects"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Numeric, Text, JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Account record; owns the wallet balance"""

    __tablename__ = "app_user"

    id = Column(String(64), primary_key=True, default=_uuid)
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    roll_number = Column(Text, nullable=True)
    wallet_balance = Column(Numeric(12, 2), nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Writes fail with StaleDataError if another transaction bumped the version
    __mapper_args__ = {"version_id_col": version}


class MenuItem(Base):
    """Catalog item; only read here to snapshot name and price"""

    __tablename__ = "menu_item"

    id = Column(String(64), primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)


class RecurringOrder(Base):
    """User's standing instruction to auto-place an order"""

    __tablename__ = "auto_order"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), nullable=False, index=True)
    item_id = Column(String(64), nullable=False)
    item_name = Column(Text, nullable=False)
    item_price = Column(Numeric(12, 2), nullable=False)  # snapshot at creation/edit
    quantity = Column(Integer, nullable=False)
    time = Column(String(5), nullable=False, index=True)  # "HH:MM" local
    frequency = Column(String(16), nullable=False)  # daily | weekdays | custom
    custom_days = Column(JSON, nullable=False, default=list)
    status = Column(String(16), nullable=False, default="active", index=True)
    last_executed_date = Column(String(10), nullable=True)  # "YYYY-MM-DD" local
    last_executed_at = Column(DateTime(timezone=True), nullable=True)
    last_failed_at = Column(DateTime(timezone=True), nullable=True)
    last_failure_reason = Column(Text, nullable=True)
    total_executions = Column(Integer, nullable=False, default=0)
    total_failures = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __mapper_args__ = {"version_id_col": version}


class AutoOrderExecution(Base):
    """Append-only audit record, one per materialization attempt"""

    __tablename__ = "auto_order_execution"

    id = Column(String(64), primary_key=True, default=_uuid)
    auto_order_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=False)
    success = Column(Boolean, nullable=False)
    order_id = Column(String(32), nullable=True)
    failure_reason = Column(Text, nullable=True)
    amount_deducted = Column(Numeric(12, 2), nullable=True)
    executed_at = Column(DateTime(timezone=True), nullable=False)


class CustomerOrder(Base):
    """Order handed to the fulfilment workflow"""

    __tablename__ = "customer_order"

    id = Column(String(64), primary_key=True, default=_uuid)
    order_id = Column(String(32), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    user_name = Column(Text, nullable=False)
    user_email = Column(Text, nullable=False, default="")
    user_roll_number = Column(Text, nullable=False, default="")
    items = Column(JSON, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    payment_mode = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    is_auto_order = Column(Boolean, nullable=False, default=False)
    auto_order_id = Column(String(64), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class WalletTransaction(Base):
    """Wallet ledger entry"""

    __tablename__ = "wallet_transaction"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(8), nullable=False)  # credit | debit
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class Notification(Base):
    """User-facing notification row; delivery happens elsewhere"""

    __tablename__ = "notification"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False)
    order_id = Column(String(32), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
