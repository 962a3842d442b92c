from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from services.booking.domain.enum import BookingStatus, TravelerType
from services.shared.utils import blank_to_none, to_decimal, to_iso_date


class TravelerRequest(BaseModel):
    """旅行者の入力スキーマ"""

    id: str = Field(..., min_length=1)
    name: str = Field(default="", description="氏名（パスポート表記）")
    age: int = Field(..., ge=0, le=130)
    type: TravelerType = Field(..., description="adult / child / infant")
    passport_number: str | None = Field(default=None, description="パスポート番号")

    @field_validator("passport_number", mode="before")
    @classmethod
    def empty_passport_to_none(cls, v):
        return blank_to_none(v)


class CreateBookingRequest(BaseModel):
    """予約作成リクエストスキーマ

    金額はクライアントの確認画面で確定した値をそのまま受け取る。
    """

    user_id: str = Field(..., min_length=1, description="ユーザーID")
    package_id: str = Field(..., min_length=1, description="パッケージID")
    package_title: str = Field(default="")
    destination: str = Field(default="")
    departure_date: date = Field(..., examples=["2026-03-01"])
    return_date: date = Field(..., examples=["2026-03-08"])
    adults_count: int = Field(default=1, ge=1)
    children_count: int = Field(default=0, ge=0)
    infants_count: int = Field(default=0, ge=0)
    travelers: list[TravelerRequest] = Field(default_factory=list)
    total_price: Decimal = Field(..., gt=0, description="合計金額")
    currency: str = Field(
        default="USD",
        pattern="^[A-Z]{3}$",
        description="通貨コード（ISO 4217）",
        examples=["USD", "JPY"],
    )
    selected_addons: list[str] = Field(default_factory=list)
    is_work_trip: bool = False
    company_name: str | None = None
    tax_id: str | None = None
    special_requests: str | None = Field(default=None, max_length=2000)

    @field_validator("total_price", mode="before")
    @classmethod
    def convert_total_price_to_decimal(cls, v):
        return to_decimal(v)

    @field_validator("departure_date", "return_date", mode="before")
    @classmethod
    def convert_to_date(cls, v):
        return to_iso_date(v)

    @field_validator("company_name", "tax_id", "special_requests", mode="before")
    @classmethod
    def empty_text_to_none(cls, v):
        return blank_to_none(v)


class ConfirmPaymentRequest(BaseModel):
    """決済確定リクエストモデル"""

    payment_reference: str = Field(..., min_length=1, description="決済リファレンス")


class RecordRefundRequest(BaseModel):
    """返金記録リクエストモデル"""

    refund_reference: str = Field(..., min_length=1, description="返金リファレンス")


class CancelBookingRequest(BaseModel):
    """予約キャンセルリクエストモデル"""

    reason: str | None = Field(default=None, max_length=500)


class UpdateStatusRequest(BaseModel):
    """ステータス更新リクエストモデル（運用側）"""

    status: BookingStatus
    note: str | None = Field(default=None, max_length=500)
