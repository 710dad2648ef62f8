"""Payment provider client (Razorpay orders API) and signature verification."""

import hashlib
import hmac
import logging
import time
from decimal import Decimal

import httpx

from travelworld.config import settings
from travelworld.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Convert rupees to paise."""
    return int((amount * 100).to_integral_value())


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 over ``"{order_id}|{payment_id}"``, hex-encoded."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str | None = None) -> bool:
    """Return True when ``signature`` matches the expected checkout signature."""
    key = settings.razorpay_key_secret if secret is None else secret
    if not key:
        logger.error("Payment signature check attempted without a configured key secret")
        return False
    expected = compute_signature(order_id, payment_id, key)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8", "replace"))


def get_payment_http_client() -> httpx.AsyncClient:
    """Create an HTTP client authenticated with the provider key pair."""
    return httpx.AsyncClient(
        base_url=settings.payment_api_base,
        auth=(settings.razorpay_key_id, settings.razorpay_key_secret),
        timeout=settings.payment_timeout,
    )


async def create_order(amount: Decimal, client: httpx.AsyncClient | None = None) -> dict:
    """Create a provider order for ``amount`` in the configured currency.

    Raises:
        UpstreamFailure: The provider is unreachable or rejected the request.
    """
    payload = {
        "amount": to_minor_units(amount),
        "currency": settings.payment_currency,
        "receipt": f"rcptid_{int(time.time() * 1000)}",
    }
    owns_client = client is None
    http = client or get_payment_http_client()
    try:
        logger.info("Creating payment order for %s %s", payload["amount"], payload["currency"])
        response = await http.post("/orders", json=payload)
        response.raise_for_status()
        order = response.json()
    except httpx.HTTPStatusError as exc:
        logger.warning("Payment provider rejected order: %s", exc.response.status_code)
        raise UpstreamFailure("Failed to create payment order", error=exc.response.text) from None
    except httpx.HTTPError as exc:
        logger.warning("Payment provider unreachable: %s", exc)
        raise UpstreamFailure("Failed to create payment order", error=str(exc)) from None
    finally:
        if owns_client:
            await http.aclose()

    logger.info("Created payment order %s", order.get("id"))
    return order
