from abc import ABC, abstractmethod

from services.payment.domain.value_object import AuthorizationResult, PaymentIntent
from services.shared.domain import Money


class PaymentGateway(ABC):
    """外部決済ゲートウェイのインターフェース"""

    @abstractmethod
    async def create_intent(self, amount: Money, order_ref: str) -> PaymentIntent:
        """決済インテントを作成する（order_ref には予約IDを渡す）"""
        raise NotImplementedError

    @abstractmethod
    async def present_authorization(self, intent: PaymentIntent) -> AuthorizationResult:
        """承認フローを実行し、authorized / cancelled / failed のいずれかを返す"""
        raise NotImplementedError
