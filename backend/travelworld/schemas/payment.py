"""Pydantic v2 request/response schemas for payment endpoints."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from travelworld.schemas.common import RequestModel


class CreateOrderRequest(RequestModel):
    """Amount in major currency units (rupees)."""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class VerifyPaymentRequest(BaseModel):
    """Field names follow the payment provider's checkout callback."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class OrderResponse(BaseModel):
    success: bool = True
    order: dict
