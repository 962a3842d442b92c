from dataclasses import dataclass, field

from services.shared.domain import Money


@dataclass(frozen=True)
class PaymentIntent:
    """ゲートウェイが発行する決済インテント"""

    intent_id: str
    client_secret: str = field(repr=False)
    amount: Money
    order_ref: str

    def __post_init__(self) -> None:
        if not self.intent_id:
            raise ValueError("Payment intent id cannot be empty")
