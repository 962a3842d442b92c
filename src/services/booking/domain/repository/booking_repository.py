from abc import abstractmethod

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.value_object import BookingId
from services.shared.domain import Repository, UserId


class BookingRepository(Repository[Booking, BookingId]):
    """予約レポジトリのインターフェース

    ストアは後勝ちで楽観ロックを持たないため、update は
    期待するステータスとリビジョンを条件にした1回の書き込みで行う。
    """

    @abstractmethod
    async def save(self, booking: Booking) -> None:
        """新規予約を保存する（同じIDが存在すれば DuplicateResourceException）"""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, booking_id: BookingId) -> Booking | None:
        """予約IDで検索する"""
        raise NotImplementedError

    @abstractmethod
    async def find_by_user_id(self, user_id: UserId) -> list[Booking]:
        """ユーザーの予約を新しい順に返す"""
        raise NotImplementedError

    @abstractmethod
    async def update(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        expected_revision: int,
    ) -> None:
        """可変項目をまとめて更新する（条件不一致なら OptimisticLockException）"""
        raise NotImplementedError
