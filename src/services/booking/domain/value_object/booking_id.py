from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class BookingId:
    """予約ID

    ストアが払い出す不透明な文字列。例: "bk_0f8c2a..."
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("BookingId cannot be empty")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls) -> BookingId:
        """新しい予約IDを採番する"""
        return cls(value=f"bk_{uuid.uuid4().hex}")
