from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Protocol

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.booking.domain.value_object import BookingId
from services.shared.domain import UserId
from services.shared.domain.exception import StoreUnavailableException
from services.shared.utils import get_logger

logger = get_logger("client")


class BookingReader(Protocol):
    async def get_user_bookings(self, user_id: UserId) -> list[Booking]: ...


@dataclass(frozen=True)
class OptimisticChange:
    """サーバーの応答を待っている変更（期待しているステータス）"""

    expected_status: BookingStatus
    expected_payment_status: PaymentStatus | None = None


@dataclass(frozen=True)
class CacheEntry:
    """2フェーズのキャッシュエントリ（確定済みの記録 + 応答待ちの変更）"""

    confirmed: Booking | None = None
    pending: OptimisticChange | None = None

    @property
    def is_divergent(self) -> bool:
        """応答待ちの変更が確定済みの記録と食い違っているか"""
        if self.pending is None:
            return False
        if self.confirmed is None:
            return True
        if self.confirmed.status != self.pending.expected_status:
            return True
        return (
            self.pending.expected_payment_status is not None
            and self.confirmed.payment_status != self.pending.expected_payment_status
        )


@dataclass(frozen=True)
class BookingView:
    """画面に表示する予約（確定済みの記録 + 表示用のステータス）"""

    booking: Booking
    displayed_status: BookingStatus
    displayed_payment_status: PaymentStatus
    is_pending: bool = False

    @classmethod
    def of(cls, entry: CacheEntry) -> BookingView:
        booking = entry.confirmed
        pending = entry.pending
        if pending is None:
            return cls(
                booking=booking,
                displayed_status=booking.status,
                displayed_payment_status=booking.payment_status,
            )
        return cls(
            booking=booking,
            displayed_status=pending.expected_status,
            displayed_payment_status=(
                pending.expected_payment_status or booking.payment_status
            ),
            is_pending=True,
        )


class LocalReconciledCache:
    """クライアント側の予約キャッシュ

    ストアの記録を正とし、楽観的な表示は応答待ちの変更として別に持つ。
    キャッシュ自身が状態遷移を起こすことはない。
    """

    def __init__(self, booking_service: BookingReader) -> None:
        self._booking_service = booking_service
        self._entries: dict[BookingId, CacheEntry] = {}

    def begin_optimistic(
        self,
        booking_id: BookingId,
        expected_status: BookingStatus,
        expected_payment_status: PaymentStatus | None = None,
    ) -> None:
        entry = self._entries.get(booking_id, CacheEntry())
        self._entries[booking_id] = replace(
            entry,
            pending=OptimisticChange(
                expected_status=expected_status,
                expected_payment_status=expected_payment_status,
            ),
        )

    def reconcile(self, booking: Booking) -> None:
        """サーバーが返した記録で置き換え、応答待ちの変更を消す"""
        if booking.id not in self._entries:
            # 新しい予約は一覧の先頭に置く
            self._entries = {booking.id: CacheEntry(), **self._entries}
        self._entries[booking.id] = CacheEntry(confirmed=booking)

    def discard_optimistic(self, booking_id: BookingId) -> None:
        """失敗した変更を取り消し、確定済みの記録の表示に戻す"""
        entry = self._entries.get(booking_id)
        if entry is None:
            return
        if entry.confirmed is None:
            del self._entries[booking_id]
            return
        self._entries[booking_id] = replace(entry, pending=None)

    def replace_all(self, bookings: Iterable[Booking]) -> None:
        """一覧をサーバーの記録で置き換える（応答待ちの変更は残す）"""
        entries: dict[BookingId, CacheEntry] = {}
        for booking in bookings:
            previous = self._entries.get(booking.id)
            pending = previous.pending if previous else None
            entries[booking.id] = CacheEntry(confirmed=booking, pending=pending)
        self._entries = entries

    async def refresh(self, user_id: UserId) -> bool:
        """画面表示時にサーバーから取り直す

        一時的な読み取りエラーはログに残して無視し、古いキャッシュを表示し続ける。
        """
        try:
            bookings = await self._booking_service.get_user_bookings(user_id)
        except StoreUnavailableException:
            logger.warning(
                "Failed to refresh bookings, keeping cached data",
                extra={"user_id": str(user_id)},
            )
            return False

        self.replace_all(bookings)
        return True

    def bookings(self) -> list[BookingView]:
        return [
            BookingView.of(entry)
            for entry in self._entries.values()
            if entry.confirmed is not None
        ]

    def get(self, booking_id: BookingId) -> BookingView | None:
        entry = self._entries.get(booking_id)
        if entry is None or entry.confirmed is None:
            return None
        return BookingView.of(entry)

    def divergent_ids(self) -> list[BookingId]:
        return [
            booking_id
            for booking_id, entry in self._entries.items()
            if entry.is_divergent
        ]

    def clear(self) -> None:
        self._entries = {}
