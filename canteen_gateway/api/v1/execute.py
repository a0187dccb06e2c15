"""GET /v1/auto-orders/execute - on-demand auto-order batch pass"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from canteen_gateway.api.v1.schemas import BatchRunResponse
from canteen_gateway.api.dependencies import get_auto_order_engine, get_request_id, verify_trigger_secret
from canteen_gateway.config import settings
from canteen_gateway.services.auto_order_engine import AutoOrderEngine
from canteen_gateway.utils.date_utils import is_valid_time

router = APIRouter()


@router.get(
    "/auto-orders/execute",
    response_model=BatchRunResponse,
    responses={500: {"model": BatchRunResponse}},
    dependencies=[Depends(verify_trigger_secret)],
)
def execute_auto_orders(
    request: Request,
    time: Optional[str] = Query(None, description="Override local time HH:MM (non-production only)"),
    engine: AutoOrderEngine = Depends(get_auto_order_engine),
):
    """
    Run exactly one batch pass now.

    Returns 200 whenever the pass itself ran (individual orders may still
    have failed) and 500 when the pass was aborted, e.g. database unreachable.
    """
    request_id = get_request_id(request)

    if time is not None:
        if settings.is_production:
            raise HTTPException(status_code=403, detail="Time override is disabled in production")
        if not is_valid_time(time):
            raise HTTPException(status_code=400, detail="Time must be in HH:MM format (24-hour)")

    logging.info("On-demand auto-order run requested", extra={"request_id": request_id, "override_time": time})
    summary = engine.run(override_time=time, trigger="on_demand")

    status_code = 200 if summary.success else 500
    return JSONResponse(content=BatchRunResponse(**asdict(summary)).model_dump(), status_code=status_code)
