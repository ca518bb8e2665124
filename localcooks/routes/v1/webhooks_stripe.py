# localcooks/routes/v1/webhooks_stripe.py
"""
Stripe webhook receiver - API v1

POST /webhooks/stripe verifies the signature against each configured secret,
then hands the event to StripeConnectService. Processing errors are logged
and acknowledged with 200 so Stripe does not retry non-recoverable events.
"""

import asyncio
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ...api.dependencies.services import get_stripe_connect_service
from ...core.exceptions import DomainException, ServiceException
from ...services.stripe_connect_service import StripeConnectService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks-v1"])


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    stripe_service: StripeConnectService = Depends(get_stripe_connect_service),
) -> Dict[str, Any]:
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    if not sig_header:
        logger.warning("Webhook received without signature")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No signature")

    try:
        event = stripe_service.construct_event(payload, sig_header)
    except ServiceException as e:
        logger.error(f"Webhook configuration error: {e.message}")
        raise e.to_http_exception()
    except ValueError:
        logger.error("Webhook signature verification failed with all configured secrets")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    event_type = event.get("type", "unknown")
    try:
        handled = await asyncio.to_thread(stripe_service.handle_webhook_event, event)
    except (DomainException, KeyError, TypeError, AttributeError) as e:
        logger.error(f"Error processing Stripe webhook {event_type}: {str(e)}")
        return {"received": True, "status": "error", "eventType": event_type}

    logger.info(f"Webhook processed: {event_type} (handled={handled})")
    return {"received": True, "status": "success", "eventType": event_type}


__all__ = ["router"]
