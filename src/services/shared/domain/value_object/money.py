from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .currency import Currency


@dataclass(frozen=True)
class Money:
    """金額（通貨の基本単位、Decimal で保持）

    予約の合計金額と決済金額に使う。金額の計算（合計・割引）は予約フォーム側の
    責務で、ここでは値の妥当性だけを保証する。
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if not self.amount.is_finite():
            raise ValueError(f"Amount must be a finite number: {self.amount}")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"

    def is_zero(self) -> bool:
        return self.amount == 0

    @classmethod
    def of(cls, amount: Decimal | int | str, currency_code: str) -> Money:
        """数値と通貨コードから Money を生成（float は str 経由で変換済みであること）"""
        return cls(Decimal(str(amount)), Currency(currency_code))
