"""
Payment Routes
Stripe checkout and webhook
"""

from fastapi import APIRouter, Depends, Request
from databases import Database
from app.auth import get_current_user
from app.database import get_database
from app.schemas.payment import CreatePaymentIntentRequest, PaymentIntentResponse, WebhookResponse
from app.services.payment_service import payment_service

router = APIRouter()


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_database)
):
    """
    Create a Stripe PaymentIntent for an item

    - **amount**: Optional expected amount in cents (must match the item price)
    - **item_id**: Item being paid for
    - **transaction_type**: RENT or BUY

    Returns the client secret for the frontend checkout.
    """
    return await payment_service.create_payment_intent(db, request, current_user["user_id"])


@router.post("/webhook", response_model=WebhookResponse)
async def stripe_webhook(
    request: Request,
    db: Database = Depends(get_database)
):
    """
    Stripe webhook

    Signed by Stripe; the raw body is verified before anything is applied.
    """
    payload = await request.body()
    event = payment_service.verify_webhook(payload, request.headers.get("stripe-signature"))
    return await payment_service.handle_event(db, event)
