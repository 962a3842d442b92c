import asyncio
import os
from decimal import Decimal
from typing import Protocol

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.value_object import BookingId
from services.payment.domain.entity import PaymentAttempt
from services.payment.domain.enum import AuthorizationStatus
from services.payment.domain.gateway import PaymentGateway
from services.payment.domain.value_object import PaymentOutcome
from services.shared.domain import Money
from services.shared.domain.exception import (
    AlreadyInProgressException,
    InvalidStateException,
    PaymentAuthorizedButNotConfirmedException,
    StoreUnavailableException,
    ValidationException,
)
from services.shared.utils import get_logger

logger = get_logger("payment")

_TRANSIENT_ERRORS = (StoreUnavailableException, ConnectionError, TimeoutError)


class BookingLifecycle(Protocol):
    """オーケストレータが必要とする BookingService の操作"""

    async def get_booking_by_id(self, booking_id: BookingId) -> Booking: ...

    async def confirm_booking_payment(
        self, booking_id: BookingId, payment_reference: str
    ) -> Booking: ...


class PaymentOrchestrator:
    """決済の2フェーズ処理（インテント作成 -> 外部承認 -> 予約への反映）

    - 予約ごとに同時に進行できる決済は1件まで
    - 承認済みで未反映の決済は握りつぶさず専用の例外で通知する
    """

    def __init__(
        self,
        booking_service: BookingLifecycle,
        gateway: PaymentGateway,
        confirm_retry_delay: float | None = None,
    ) -> None:
        self._booking_service = booking_service
        self._gateway = gateway
        self._confirm_retry_delay = (
            confirm_retry_delay
            if confirm_retry_delay is not None
            else float(os.getenv("CONFIRM_RETRY_DELAY_SECONDS", "1.0"))
        )
        self._in_flight: set[str] = set()

    def is_in_flight(self, booking_id: BookingId) -> bool:
        """決済が進行中かどうか（UI で競合する操作を無効化するため）"""
        return str(booking_id) in self._in_flight

    async def start_payment(
        self,
        booking_id: BookingId,
        amount: Decimal,
        currency: str | None = None,
    ) -> PaymentOutcome:
        """予約の決済を開始する

        2件目の同時呼び出しは待たせずに AlreadyInProgressException で拒否する。
        """
        key = str(booking_id)
        # await より前に確認と登録を済ませる
        if key in self._in_flight:
            raise AlreadyInProgressException(key)
        self._in_flight.add(key)
        try:
            return await self._pay(booking_id, amount, currency)
        finally:
            self._in_flight.discard(key)

    async def _pay(
        self, booking_id: BookingId, amount: Decimal, currency: str | None
    ) -> PaymentOutcome:
        booking = await self._booking_service.get_booking_by_id(booking_id)
        if booking.status != BookingStatus.PENDING_PAYMENT:
            raise InvalidStateException(
                f"Cannot start payment for a booking in {booking.status.value} status",
                current=booking.status.value,
                target=BookingStatus.PROCESSING.value,
            )

        try:
            money = Money.of(amount, currency or str(booking.total_price.currency))
        except (ValueError, ArithmeticError) as e:
            raise ValidationException(str(e), field="amount") from e
        if money.is_zero():
            raise ValidationException(
                "Payment amount must be greater than zero", field="amount"
            )

        attempt = PaymentAttempt(booking_id=booking_id, amount=money)
        intent = await self._gateway.create_intent(money, order_ref=str(booking_id))
        attempt.attach(intent)
        logger.info(
            "Payment intent created",
            extra={"booking_id": str(booking_id), "intent_id": intent.intent_id},
        )

        result = await self._gateway.present_authorization(intent)
        if result.status != AuthorizationStatus.AUTHORIZED:
            attempt.finish()
            logger.info(
                "Payment not authorized",
                extra={
                    "booking_id": str(booking_id),
                    "intent_id": intent.intent_id,
                    "status": result.status.value,
                    "reason": result.reason,
                },
            )
            return PaymentOutcome.not_charged(result.status, error=result.reason)

        reference = result.reference or intent.intent_id
        confirmed = await self._confirm(booking_id, reference)
        attempt.finish()
        return PaymentOutcome.confirmed(reference, confirmed)

    async def _confirm(self, booking_id: BookingId, payment_reference: str) -> Booking:
        """承認済みの決済を予約に反映する（一時的な障害は1回だけ再試行）"""
        context = {
            "booking_id": str(booking_id),
            "payment_reference": payment_reference,
        }
        try:
            return await self._booking_service.confirm_booking_payment(
                booking_id, payment_reference
            )
        except _TRANSIENT_ERRORS:
            logger.warning("Confirming payment failed, retrying once", extra=context)
        except Exception as e:
            logger.exception("Authorized payment could not be confirmed", extra=context)
            raise PaymentAuthorizedButNotConfirmedException(
                str(booking_id), payment_reference
            ) from e

        await asyncio.sleep(self._confirm_retry_delay)
        try:
            return await self._booking_service.confirm_booking_payment(
                booking_id, payment_reference
            )
        except Exception as e:
            logger.exception("Authorized payment could not be confirmed", extra=context)
            raise PaymentAuthorizedButNotConfirmedException(
                str(booking_id), payment_reference
            ) from e
