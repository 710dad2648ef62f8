"""Payment API router — provider order creation and checkout signature check."""

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import APIRouter, Depends

from travelworld.api.deps import require_auth
from travelworld.auth.jwt import Identity
from travelworld.config import settings
from travelworld.errors import ValidationError
from travelworld.schemas.common import MessageResponse
from travelworld.schemas.payment import CreateOrderRequest, OrderResponse, VerifyPaymentRequest
from travelworld.services import payments

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.api_prefix}/payment", tags=["payment"])


async def get_payment_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield a provider HTTP client for the duration of one request."""
    async with payments.get_payment_http_client() as client:
        yield client


@router.post("/create-order", response_model=OrderResponse)
async def create_order(
    body: CreateOrderRequest,
    identity: Identity = Depends(require_auth),
    client: httpx.AsyncClient = Depends(get_payment_client),
) -> OrderResponse:
    """Create a provider order for ``amount`` rupees."""
    order = await payments.create_order(body.amount, client=client)
    logger.info("User %s created payment order %s", identity.id, order.get("id"))
    return OrderResponse(order=order)


@router.post("/verify-payment", response_model=MessageResponse)
async def verify_payment(body: VerifyPaymentRequest) -> MessageResponse:
    """Check the checkout signature the provider handed to the client."""
    if not payments.verify_signature(body.razorpay_order_id, body.razorpay_payment_id, body.razorpay_signature):
        logger.warning("Payment signature mismatch for order %s", body.razorpay_order_id)
        raise ValidationError("Invalid signature")
    logger.info("Verified payment %s for order %s", body.razorpay_payment_id, body.razorpay_order_id)
    return MessageResponse(message="Payment verified")
