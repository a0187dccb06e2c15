"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from canteen_gateway.domain.exceptions import InvalidScheduleError
from canteen_gateway.domain.recurrence import validate_schedule

TIME_REGEX = r"^([01]\d|2[0-3]):[0-5]\d$"

Frequency = Literal["daily", "weekdays", "custom"]
DayOfWeek = Literal["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class RecurringOrderCreate(BaseModel):
    """Request body for POST /v1/auto-orders"""

    item_id: str = Field(..., min_length=1, description="Catalog item identifier")
    quantity: int = Field(..., gt=0, description="Units per order")
    time: str = Field(..., pattern=TIME_REGEX, description="Local fire time, 24-hour HH:MM")
    frequency: Frequency
    custom_days: List[DayOfWeek] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_schedule(self) -> "RecurringOrderCreate":
        try:
            validate_schedule(self.frequency, self.custom_days)
        except InvalidScheduleError as e:
            raise ValueError(str(e)) from e
        return self


class RecurringOrderUpdate(BaseModel):
    """Request body for PATCH /v1/auto-orders/{id}; every field optional"""

    status: Optional[Literal["active", "paused"]] = None
    item_id: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, gt=0)
    time: Optional[str] = Field(None, pattern=TIME_REGEX)
    frequency: Optional[Frequency] = None
    custom_days: Optional[List[DayOfWeek]] = None

    @model_validator(mode="after")
    def check_schedule(self) -> "RecurringOrderUpdate":
        if self.frequency is not None:
            try:
                validate_schedule(self.frequency, self.custom_days)
            except InvalidScheduleError as e:
                raise ValueError(str(e)) from e
        elif self.custom_days is not None:
            raise ValueError("custom_days can only be changed together with frequency")
        return self


class RecurringOrderResponse(BaseModel):
    """Single recurring order as seen by its owner"""

    id: str
    user_id: str
    item_id: str
    item_name: str
    item_price: Decimal
    quantity: int
    time: str
    frequency: str
    custom_days: List[str]
    status: str
    last_executed_date: Optional[str] = None
    last_executed_at: Optional[datetime] = None
    last_failed_at: Optional[datetime] = None
    last_failure_reason: Optional[str] = None
    total_executions: int
    total_failures: int
    created_at: datetime
    updated_at: datetime


class RecurringOrderListResponse(BaseModel):
    """Response for GET /v1/auto-orders"""

    user_id: str
    auto_orders: List[RecurringOrderResponse]


class BatchRunResponse(BaseModel):
    """Response for GET /v1/auto-orders/execute"""

    success: bool
    time: str
    day: str
    date: str
    candidates: int
    skipped: int
    processed: int
    succeeded: int
    failed: int
    errors: List[str]
    message: Optional[str] = None
