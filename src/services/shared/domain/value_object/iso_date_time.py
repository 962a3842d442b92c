from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone


@dataclass(frozen=True)
class IsoDateTime:
    """タイムゾーン付きの日時（ISO 8601形式で保存・表示する）

    ステータス履歴の並び順に使うため、naive な datetime は受け付けない。
    """

    value: datetime

    def __post_init__(self) -> None:
        if self.value.tzinfo is None:
            raise ValueError(f"Datetime must be timezone-aware: {self.value}")

    @classmethod
    def from_string(cls, s: str) -> IsoDateTime:
        """ISO 8601 形式の文字列から生成（"Z" 表記も可）"""
        try:
            dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError as e:
            raise ValueError(f"Invalid ISO 8601 datetime: {s}") from e
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return cls(value=dt)

    @classmethod
    def now(cls) -> IsoDateTime:
        return cls(value=datetime.now(timezone.utc))

    def __str__(self) -> str:
        return self.value.isoformat()

    def utc_date(self) -> date:
        """UTC での日付（旅行の終了判定に使う）"""
        return self.value.astimezone(timezone.utc).date()
