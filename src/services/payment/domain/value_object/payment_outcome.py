from __future__ import annotations

from dataclasses import dataclass

from services.booking.domain.entity import Booking
from services.payment.domain.enum import AuthorizationStatus


@dataclass(frozen=True)
class PaymentOutcome:
    """start_payment の呼び出し元に返す結果"""

    success: bool
    status: AuthorizationStatus
    payment_reference: str | None = None
    error: str | None = None
    booking: Booking | None = None

    @classmethod
    def confirmed(cls, payment_reference: str, booking: Booking) -> PaymentOutcome:
        return cls(
            success=True,
            status=AuthorizationStatus.AUTHORIZED,
            payment_reference=payment_reference,
            booking=booking,
        )

    @classmethod
    def not_charged(
        cls, status: AuthorizationStatus, error: str | None = None
    ) -> PaymentOutcome:
        return cls(success=False, status=status, error=error)
