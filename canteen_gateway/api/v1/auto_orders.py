"""/v1/auto-orders - owner-scoped CRUD for recurring orders"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from canteen_gateway.api.v1.schemas import (
    RecurringOrderCreate,
    RecurringOrderListResponse,
    RecurringOrderResponse,
    RecurringOrderUpdate,
)
from canteen_gateway.api.dependencies import get_current_user_id, get_request_id
from canteen_gateway.infrastructure.database.models import MenuItem, RecurringOrder
from canteen_gateway.infrastructure.database.session import get_db
from canteen_gateway.infrastructure.database.repositories import MenuItemRepository, RecurringOrderRepository
from canteen_gateway.domain.exceptions import (
    ForbiddenError,
    MenuItemNotFoundError,
    RecurringOrderNotFoundError,
)
from canteen_gateway.domain.money import to_amount

router = APIRouter()


def _to_response(order: RecurringOrder) -> RecurringOrderResponse:
    return RecurringOrderResponse(
        id=order.id,
        user_id=order.user_id,
        item_id=order.item_id,
        item_name=order.item_name,
        item_price=to_amount(order.item_price),
        quantity=order.quantity,
        time=order.time,
        frequency=order.frequency,
        custom_days=list(order.custom_days or []),
        status=order.status,
        last_executed_date=order.last_executed_date,
        last_executed_at=order.last_executed_at,
        last_failed_at=order.last_failed_at,
        last_failure_reason=order.last_failure_reason,
        total_executions=order.total_executions,
        total_failures=order.total_failures,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _get_owned_order(repo: RecurringOrderRepository, order_id: str, user_id: str) -> RecurringOrder:
    """
    Raises:
        RecurringOrderNotFoundError: no such recurring order
        ForbiddenError: caller is not the owner
    """
    order = repo.get_by_id(order_id)
    if order is None:
        raise RecurringOrderNotFoundError(f"Auto order {order_id} not found")
    if order.user_id != user_id:
        raise ForbiddenError(f"Auto order {order_id} belongs to another user")
    return order


def _get_orderable_item(db: Session, item_id: str) -> MenuItem:
    item = MenuItemRepository(db).get_by_id(item_id)
    if item is None:
        raise MenuItemNotFoundError(f"Menu item {item_id} not found")
    return item


@router.get("/auto-orders", response_model=RecurringOrderListResponse)
def list_auto_orders(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's recurring orders"""
    orders = RecurringOrderRepository(db).list_by_user(user_id)
    return RecurringOrderListResponse(user_id=user_id, auto_orders=[_to_response(o) for o in orders])


@router.post("/auto-orders", response_model=RecurringOrderResponse, status_code=201)
def create_auto_order(
    request_body: RecurringOrderCreate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Create a recurring order for the caller.

    The catalog item's current name and price are copied onto the order;
    later catalog price changes do not affect it.
    """
    request_id = get_request_id(request)
    try:
        item = _get_orderable_item(db, request_body.item_id)
        if not item.is_available:
            raise HTTPException(status_code=400, detail="Menu item is not available")

        order = RecurringOrderRepository(db).create(
            user_id=user_id,
            item=item,
            quantity=request_body.quantity,
            time=request_body.time,
            frequency=request_body.frequency,
            custom_days=list(request_body.custom_days),
            now=datetime.now(timezone.utc),
        )
        db.commit()
        db.refresh(order)

        logging.info(
            "Auto order created",
            extra={"request_id": request_id, "user_id": user_id, "auto_order_id": order.id, "time": order.time},
        )
        return _to_response(order)

    except MenuItemNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except HTTPException:
        db.rollback()
        raise

    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create auto order: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to create auto order")


@router.patch("/auto-orders/{auto_order_id}", response_model=RecurringOrderResponse)
def update_auto_order(
    auto_order_id: str,
    request_body: RecurringOrderUpdate,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Update fields, or pause/resume via status"""
    request_id = get_request_id(request)
    try:
        order = _get_owned_order(RecurringOrderRepository(db), auto_order_id, user_id)

        if request_body.status is not None:
            order.status = request_body.status
        if request_body.quantity is not None:
            order.quantity = request_body.quantity
        if request_body.time is not None:
            order.time = request_body.time
        if request_body.frequency is not None:
            order.frequency = request_body.frequency
            order.custom_days = list(request_body.custom_days or []) if request_body.frequency == "custom" else []
        if request_body.item_id is not None:
            item = _get_orderable_item(db, request_body.item_id)
            order.item_id = item.id
            order.item_name = item.name
            order.item_price = item.price

        order.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(order)

        logging.info(
            "Auto order updated",
            extra={"request_id": request_id, "user_id": user_id, "auto_order_id": order.id, "status": order.status},
        )
        return _to_response(order)

    except (RecurringOrderNotFoundError, MenuItemNotFoundError) as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ForbiddenError:
        db.rollback()
        raise HTTPException(status_code=403, detail="Forbidden")

    except Exception as e:
        db.rollback()
        logging.error(f"Failed to update auto order: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to update auto order")


@router.delete("/auto-orders/{auto_order_id}", status_code=204)
def delete_auto_order(
    auto_order_id: str,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete one of the caller's recurring orders"""
    request_id = get_request_id(request)
    try:
        repo = RecurringOrderRepository(db)
        order = _get_owned_order(repo, auto_order_id, user_id)
        repo.delete(order)
        db.commit()

    except RecurringOrderNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except ForbiddenError:
        db.rollback()
        raise HTTPException(status_code=403, detail="Forbidden")

    except Exception as e:
        db.rollback()
        logging.error(f"Failed to delete auto order: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to delete auto order")

    logging.info("Auto order deleted", extra={"request_id": request_id, "user_id": user_id, "auto_order_id": auto_order_id})
    return Response(status_code=204)
