from enum import Enum


class PaymentStatus(str, Enum):
    """予約に対する決済ステータス"""

    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"
