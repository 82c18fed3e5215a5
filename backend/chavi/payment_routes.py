"""
Razorpay order creation and payment verification.

The flow for a donation that goes on to payment:
    POST /api/donations        -> recorded
    POST /api/create-order     -> order_created
    (Razorpay Checkout in the browser)
    POST /api/verify-payment   -> verified | verification_failed
"""
import logging
import uuid

from fastapi import APIRouter, Depends

from . import models, schemas
from .config import Settings
from .deps import get_gateway, get_settings, get_store
from .errors import InvalidInput, PersistenceError, VerificationFailed
from .razorpay_gateway import RazorpayGateway
from .store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Payments"])

# how far a client amount may drift from the stored donation (float form values)
AMOUNT_TOLERANCE = 0.005


def to_minor_units(amount: float) -> int:
    try:
        return int(round(amount * 100))
    except OverflowError:
        raise InvalidInput("Invalid amount", detail=f"amount {amount} is too large") from None


@router.post('/create-order')
def create_order(
    payload: schemas.OrderCreate,
    store: RecordStore = Depends(get_store),
    gateway: RazorpayGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Create an auto-captured Razorpay order.

    With `donationId` the amount comes from the stored donation, never from the
    request; a client amount that disagrees is rejected. Without it the client
    amount is used as-is.
    """
    amount = payload.amount
    donation_id = payload.donation_id
    if donation_id is not None:
        donation = store.get_donation(donation_id)
        if donation is None:
            raise InvalidInput("Unknown donation", detail=f"donation {donation_id} not found")
        if donation.status == models.VERIFIED:
            raise InvalidInput("Donation already paid", detail=f"donation {donation_id} is verified")
        if amount is not None and abs(amount - donation.amount) > AMOUNT_TOLERANCE:
            raise InvalidInput("Invalid amount",
                               detail=f"amount {amount} does not match donation {donation_id} ({donation.amount})")
        amount = donation.amount

    if amount is None:
        raise InvalidInput("Invalid amount", detail="amount missing")
    minor = to_minor_units(amount)
    if minor <= 0:
        raise InvalidInput("Invalid amount", detail=f"amount {amount} rounds to {minor} paise")

    receipt = f"donation_{donation_id}" if donation_id is not None else f"rcpt_{uuid.uuid4().hex[:12]}"
    notes = {"donation_id": str(donation_id)} if donation_id is not None else None
    order = gateway.create_order(minor, settings.currency, receipt=receipt, notes=notes)
    try:
        store.add_order(order["id"], minor, settings.currency, receipt=receipt, donation_id=donation_id)
    except PersistenceError:
        # the gateway order exists but nothing here points at it
        logger.error("Razorpay order %s (donation=%s, amount=%d) created but not stored",
                     order["id"], donation_id, minor)
        raise

    return {
        "orderId": order["id"],
        "key": gateway.key_id,
        "amount": minor,
        "currency": settings.currency,
    }


@router.post('/verify-payment')
def verify_payment(
    payload: schemas.PaymentVerification,
    store: RecordStore = Depends(get_store),
    gateway: RazorpayGateway = Depends(get_gateway),
):
    ok = gateway.verify_payment_signature(payload.order_id, payload.payment_id, payload.signature)
    order = store.mark_payment(payload.order_id, payload.payment_id, verified=ok)
    if order is None:
        logger.warning("Payment %s refers to order %s that was not created here", payload.payment_id, payload.order_id)
    if not ok:
        raise VerificationFailed(detail=f"signature mismatch for order {payload.order_id} payment {payload.payment_id}")
    logger.info("Payment %s verified for order %s", payload.payment_id, payload.order_id)
    return {"success": True}
