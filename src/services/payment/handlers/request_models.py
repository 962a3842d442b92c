from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from services.shared.utils import to_decimal


class CreatePaymentIntentRequest(BaseModel):
    """決済インテント作成リクエストモデル"""

    booking_id: str = Field(..., min_length=1)
    amount: Decimal = Field(
        ...,
        gt=0,
        description="決済金額（0より大きい値、通貨の基本単位）",
    )
    currency: str | None = Field(
        default=None,
        pattern="^[A-Z]{3}$",
        description="通貨コード（ISO 4217）。省略時は予約の通貨",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v):
        return to_decimal(v)
