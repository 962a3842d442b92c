from decimal import Decimal
from typing import TypedDict

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.booking.domain.value_object import (
    BookingId,
    PartyComposition,
    StatusHistoryEntry,
    Traveler,
    TravelPeriod,
)
from services.shared.domain import Currency, IsoDateTime, Money, UserId
from services.shared.domain.exception import ValidationException

CREATED_NOTE = "Booking created - awaiting payment"


class BookingPayload(TypedDict):
    """予約作成の入力データ構造（TypedDict）"""

    user_id: str
    package_id: str
    package_title: str
    destination: str
    departure_date: str
    return_date: str
    adults_count: int
    children_count: int
    infants_count: int
    travelers: list[Traveler]
    total_price: Decimal
    currency: str
    selected_addons: list[str]
    is_work_trip: bool
    company_name: str | None
    tax_id: str | None
    special_requests: str | None


class BookingFactory:
    """予約ファクトリ

    クライアント側の検証は信用せず、金銭を伴う記録を作る前にここで再検証する。
    """

    def create(
        self,
        booking_id: BookingId,
        payload: BookingPayload,
        now: IsoDateTime,
    ) -> Booking:
        """新規予約エンティティを生成する"""
        user_id = self._required(payload, "user_id")
        package_id = self._required(payload, "package_id")

        party = self._to_party(payload)
        travel_period = self._to_travel_period(payload)
        travelers = self._to_travelers(payload, party)
        total_price = self._to_total_price(payload)

        is_work_trip = bool(payload.get("is_work_trip", False))
        company_name = (payload.get("company_name") or "").strip() or None
        if is_work_trip and company_name is None:
            raise ValidationException(
                "Company name is required for a work trip", field="company_name"
            )

        return Booking(
            id=booking_id,
            user_id=UserId(value=user_id),
            package_id=package_id,
            package_title=payload.get("package_title") or "",
            destination=payload.get("destination") or "",
            travel_period=travel_period,
            party=party,
            travelers=travelers,
            total_price=total_price,
            created_at=now,
            status=BookingStatus.PENDING_PAYMENT,
            payment_status=PaymentStatus.PENDING,
            status_history=(
                StatusHistoryEntry(
                    status=BookingStatus.PENDING_PAYMENT, date=now, note=CREATED_NOTE
                ),
            ),
            selected_addons=tuple(payload.get("selected_addons") or ()),
            is_work_trip=is_work_trip,
            company_name=company_name,
            tax_id=(payload.get("tax_id") or "").strip() or None,
            special_requests=payload.get("special_requests") or None,
            revision=1,
        )

    @staticmethod
    def _required(payload: BookingPayload, field: str) -> str:
        value = payload.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationException(f"{field} is required", field=field)
        return value

    @staticmethod
    def _to_party(payload: BookingPayload) -> PartyComposition:
        try:
            return PartyComposition(
                adults=int(payload.get("adults_count", 0)),
                children=int(payload.get("children_count", 0)),
                infants=int(payload.get("infants_count", 0)),
            )
        except (TypeError, ValueError) as e:
            raise ValidationException(str(e), field="adults_count") from e

    @staticmethod
    def _to_travel_period(payload: BookingPayload) -> TravelPeriod:
        departure = payload.get("departure_date")
        return_ = payload.get("return_date")
        if not departure:
            raise ValidationException(
                "departure_date is required", field="departure_date"
            )
        if not return_:
            raise ValidationException("return_date is required", field="return_date")
        try:
            return TravelPeriod(departure_date=departure, return_date=return_)
        except (TypeError, ValueError) as e:
            raise ValidationException(str(e), field="return_date") from e

    @staticmethod
    def _to_travelers(
        payload: BookingPayload, party: PartyComposition
    ) -> tuple[Traveler, ...]:
        travelers = tuple(payload.get("travelers") or ())
        if len(travelers) != party.total:
            raise ValidationException(
                f"Expected {party.total} travelers, got {len(travelers)}",
                field="travelers",
            )
        for position, traveler in enumerate(travelers):
            traveler.validate(position)
        return travelers

    @staticmethod
    def _to_total_price(payload: BookingPayload) -> Money:
        amount = payload.get("total_price")
        if amount is None:
            raise ValidationException("total_price is required", field="total_price")
        try:
            money = Money(
                amount=Decimal(str(amount)),
                currency=Currency(payload.get("currency") or ""),
            )
        except (ValueError, ArithmeticError) as e:
            raise ValidationException(str(e), field="total_price") from e
        if money.is_zero():
            raise ValidationException(
                "total_price must be greater than zero", field="total_price"
            )
        return money
