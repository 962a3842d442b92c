from __future__ import annotations

from pydantic import BaseModel

from services.payment.domain.value_object import PaymentIntent


class PaymentIntentData(BaseModel):
    """決済インテントのレスポンスモデル"""

    payment_intent_id: str
    client_secret: str
    booking_id: str
    amount: str
    currency: str


class SuccessResponse(BaseModel):
    """成功レスポンスモデル"""

    status: str = "success"
    data: PaymentIntentData


def to_response(intent: PaymentIntent) -> dict:
    """PaymentIntent をレスポンス辞書に変換する"""
    return SuccessResponse(
        data=PaymentIntentData(
            payment_intent_id=intent.intent_id,
            client_secret=intent.client_secret,
            booking_id=intent.order_ref,
            amount=str(intent.amount.amount),
            currency=str(intent.amount.currency),
        )
    ).model_dump()
