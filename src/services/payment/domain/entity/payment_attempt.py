from dataclasses import dataclass

from services.booking.domain.value_object import BookingId
from services.payment.domain.value_object import PaymentIntent
from services.shared.domain import Money


@dataclass
class PaymentAttempt:
    """1回の決済試行（オーケストレータ内だけで使う一時データ）"""

    booking_id: BookingId
    amount: Money
    intent_id: str | None = None
    client_secret: str | None = None
    in_flight: bool = True

    def attach(self, intent: PaymentIntent) -> None:
        """発行されたインテントを紐付ける"""
        self.intent_id = intent.intent_id
        self.client_secret = intent.client_secret

    def finish(self) -> None:
        self.in_flight = False
