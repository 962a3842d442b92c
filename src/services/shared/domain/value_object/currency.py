from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class Currency:
    """通貨コード（ISO 4217、大文字に正規化）

    決済ゲートウェイが受け付ける通貨だけを許可する。
    """

    SUPPORTED: ClassVar[frozenset[str]] = frozenset(
        {"USD", "EUR", "GBP", "JPY", "AUD", "SGD", "HKD", "CNY", "NZD", "IDR", "THB"}
    )

    code: str

    def __post_init__(self) -> None:
        normalized = (self.code or "").strip().upper()
        if normalized not in self.SUPPORTED:
            raise ValueError(
                f"Unsupported currency: {self.code}. "
                f"Supported: {', '.join(sorted(self.SUPPORTED))}"
            )
        object.__setattr__(self, "code", normalized)

    def __str__(self) -> str:
        return self.code
