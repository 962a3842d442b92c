from dataclasses import dataclass

from services.booking.domain.enum import BookingStatus
from services.shared.domain import IsoDateTime


@dataclass(frozen=True)
class StatusHistoryEntry:
    """ステータス履歴の1件（追記専用の監査証跡）"""

    status: BookingStatus
    date: IsoDateTime
    note: str | None = None
