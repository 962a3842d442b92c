from __future__ import annotations

from pydantic import BaseModel

from services.booking.domain.entity import Booking


class TravelerData(BaseModel):
    id: str
    name: str
    age: int
    type: str
    passport_number: str | None = None


class StatusHistoryData(BaseModel):
    status: str
    date: str
    note: str | None = None


class BookingData(BaseModel):
    """予約データのレスポンスモデル"""

    booking_id: str
    user_id: str
    package_id: str
    package_title: str
    destination: str
    departure_date: str
    return_date: str
    adults_count: int
    children_count: int
    infants_count: int
    travelers: list[TravelerData]
    total_price: str
    currency: str
    selected_addons: list[str]
    is_work_trip: bool
    company_name: str | None = None
    tax_id: str | None = None
    special_requests: str | None = None
    status: str
    payment_status: str
    payment_id: str | None = None
    refund_id: str | None = None
    status_history: list[StatusHistoryData]
    revision: int
    created_at: str
    updated_at: str


class SuccessResponse(BaseModel):
    """成功レスポンスモデル"""

    status: str = "success"
    data: BookingData


class BookingListResponse(BaseModel):
    """予約一覧のレスポンスモデル"""

    status: str = "success"
    data: list[BookingData]


def to_booking_data(booking: Booking) -> BookingData:
    """Booking エンティティをレスポンスモデルに変換する"""
    return BookingData(
        booking_id=str(booking.id),
        user_id=str(booking.user_id),
        package_id=booking.package_id,
        package_title=booking.package_title,
        destination=booking.destination,
        departure_date=booking.travel_period.departure_date,
        return_date=booking.travel_period.return_date,
        adults_count=booking.party.adults,
        children_count=booking.party.children,
        infants_count=booking.party.infants,
        travelers=[
            TravelerData(
                id=t.id,
                name=t.name,
                age=t.age,
                type=t.type.value,
                passport_number=t.passport_number,
            )
            for t in booking.travelers
        ],
        total_price=str(booking.total_price.amount),
        currency=str(booking.total_price.currency),
        selected_addons=list(booking.selected_addons),
        is_work_trip=booking.is_work_trip,
        company_name=booking.company_name,
        tax_id=booking.tax_id,
        special_requests=booking.special_requests,
        status=booking.status.value,
        payment_status=booking.payment_status.value,
        payment_id=booking.payment_id,
        refund_id=booking.refund_id,
        status_history=[
            StatusHistoryData(status=e.status.value, date=str(e.date), note=e.note)
            for e in booking.status_history
        ],
        revision=booking.revision,
        created_at=str(booking.created_at),
        updated_at=str(booking.updated_at),
    )


def to_response(booking: Booking) -> dict:
    """Booking エンティティをレスポンス辞書に変換する"""
    return SuccessResponse(data=to_booking_data(booking)).model_dump()


def to_list_response(bookings: list[Booking]) -> dict:
    return BookingListResponse(data=[to_booking_data(b) for b in bookings]).model_dump()
