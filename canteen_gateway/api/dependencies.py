"""Dependency injection for FastAPI endpoints"""

import hmac
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request
from canteen_gateway.config import settings
from canteen_gateway.domain.exceptions import IdentityServiceError, InvalidTokenError
from canteen_gateway.infrastructure.clients.identity import IdentityClient
from canteen_gateway.infrastructure.database.session import SessionLocal
from canteen_gateway.services.auto_order_engine import AutoOrderEngine


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_identity_client() -> IdentityClient:
    """Provide identity service client instance"""
    return IdentityClient()


def get_auto_order_engine(request: Request) -> AutoOrderEngine:
    """Engine shared with the background scheduler when the app owns one"""
    engine = getattr(request.app.state, "auto_order_engine", None)
    return engine or AutoOrderEngine(session_factory=SessionLocal)


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_id(
    request: Request,
    identity_client: IdentityClient = Depends(get_identity_client),
) -> str:
    """Authenticated caller id, verified by the identity service"""
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        return await identity_client.verify_token(token)
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Unauthorized")
    except IdentityServiceError as e:
        logging.error(f"Identity service error: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Identity service unavailable")


def _matches(candidate: str, expected: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


def verify_trigger_secret(
    request: Request,
    secret: Optional[str] = Query(None, description="Shared secret (non-production only)"),
) -> None:
    """
    Guard for the on-demand auto-order trigger.

    - Authorization: Bearer <cron_secret> always accepted
    - ?secret=<cron_secret> accepted outside production only
    - No secret configured: open outside production, closed in production
    """
    cron_secret = settings.cron_secret
    request_id = get_request_id(request)

    if not cron_secret:
        if settings.is_production:
            logging.error("CRON_SECRET not set in production; rejecting trigger", extra={"request_id": request_id})
            raise HTTPException(status_code=401, detail="Unauthorized")
        logging.warning("CRON_SECRET not set - running trigger without auth (dev mode)", extra={"request_id": request_id})
        return

    token = _bearer_token(request)
    if token is not None and _matches(token, cron_secret):
        return

    if secret is not None and not settings.is_production and _matches(secret, cron_secret):
        return

    logging.warning("Unauthorized auto-order trigger attempt", extra={"request_id": request_id})
    raise HTTPException(status_code=401, detail="Unauthorized")
