from typing import Callable

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus
from services.booking.domain.factory import BookingFactory, BookingPayload
from services.booking.domain.repository import BookingRepository, PackageRepository
from services.booking.domain.value_object import BookingId
from services.shared.domain import IsoDateTime, UserId
from services.shared.domain.exception import (
    OptimisticLockException,
    PackageUnavailableException,
    ResourceNotFoundException,
)
from services.shared.utils import get_logger

logger = get_logger("booking")


class BookingService:
    """予約ライフサイクルのユースケース

    状態を変更する操作は必ず直前にストアから最新の予約を取得し直し、
    取得時のステータスとリビジョンを条件に1回で書き込む。
    """

    def __init__(
        self,
        repository: BookingRepository,
        package_repository: PackageRepository,
        factory: BookingFactory,
        clock: Callable[[], IsoDateTime] = IsoDateTime.now,
    ) -> None:
        self._repository = repository
        self._package_repository = package_repository
        self._factory = factory
        self._clock = clock

    async def create_booking(self, payload: BookingPayload) -> Booking:
        """下書きから予約を作成する（status = pending_payment）"""
        booking_id = await self._repository.next_identity()
        booking = self._factory.create(booking_id, payload, self._clock())

        package = await self._package_repository.find_by_id(booking.package_id)
        if package is None or not package.is_active:
            raise PackageUnavailableException(
                f"Package is not available: {booking.package_id}"
            )

        await self._repository.save(booking)
        logger.info(
            "Booking created",
            extra={"booking_id": str(booking.id), "package_id": booking.package_id},
        )
        return booking

    async def confirm_booking_payment(
        self, booking_id: BookingId, payment_reference: str
    ) -> Booking:
        """決済承認を予約に反映する（pending_payment -> processing）

        同じリファレンスで確定済みの予約に対しては書き込まずにそのまま返す。
        """
        booking = await self._load(booking_id)
        expected_status = booking.status
        expected_revision = booking.revision

        if not booking.confirm_payment(payment_reference, self._clock()):
            logger.info(
                "Booking payment already confirmed",
                extra={
                    "booking_id": str(booking_id),
                    "payment_reference": payment_reference,
                },
            )
            return booking

        try:
            await self._repository.update(
                booking,
                expected_status=expected_status,
                expected_revision=expected_revision,
            )
        except OptimisticLockException:
            # 同じリファレンスの確定が先に書き込まれていれば成功として扱う
            latest = await self._load(booking_id)
            if not latest.is_confirmed_with(payment_reference):
                raise
            logger.info(
                "Booking payment confirmed concurrently",
                extra={
                    "booking_id": str(booking_id),
                    "payment_reference": payment_reference,
                },
            )
            return latest
        logger.info(
            "Booking payment confirmed",
            extra={
                "booking_id": str(booking_id),
                "payment_reference": payment_reference,
            },
        )
        return booking

    async def mark_payment_refunded(
        self, booking_id: BookingId, refund_reference: str
    ) -> Booking:
        """返金の完了を記録する（refunded の予約の決済を paid -> refunded）

        ステータスは変わらないので履歴は追記しない。
        同じリファレンスで記録済みの予約に対しては書き込まずにそのまま返す。
        """
        booking = await self._load(booking_id)
        expected_status = booking.status
        expected_revision = booking.revision

        if not booking.mark_payment_refunded(refund_reference, self._clock()):
            logger.info(
                "Booking refund already recorded",
                extra={
                    "booking_id": str(booking_id),
                    "refund_reference": refund_reference,
                },
            )
            return booking

        await self._repository.update(
            booking,
            expected_status=expected_status,
            expected_revision=expected_revision,
        )
        logger.info(
            "Booking refund recorded",
            extra={
                "booking_id": str(booking_id),
                "refund_reference": refund_reference,
            },
        )
        return booking

    async def cancel_booking(self, booking_id: BookingId, reason: str | None) -> Booking:
        """予約をキャンセルする（支払い済みなら refunded）"""
        booking = await self._load(booking_id)
        expected_status = booking.status
        expected_revision = booking.revision

        booking.cancel(reason, self._clock())
        await self._repository.update(
            booking,
            expected_status=expected_status,
            expected_revision=expected_revision,
        )
        logger.info(
            "Booking cancelled",
            extra={"booking_id": str(booking_id), "status": booking.status.value},
        )
        return booking

    async def update_status(
        self,
        booking_id: BookingId,
        target: BookingStatus,
        note: str | None = None,
    ) -> Booking:
        """運用側の手配状況に応じてステータスを進める"""
        booking = await self._load(booking_id)
        expected_status = booking.status
        expected_revision = booking.revision

        booking.advance_to(target, self._clock(), note=note)
        await self._repository.update(
            booking,
            expected_status=expected_status,
            expected_revision=expected_revision,
        )
        logger.info(
            "Booking status updated",
            extra={
                "booking_id": str(booking_id),
                "from_status": expected_status.value,
                "status": target.value,
            },
        )
        return booking

    async def get_user_bookings(self, user_id: UserId) -> list[Booking]:
        """ユーザーの予約一覧（参照専用）"""
        return await self._repository.find_by_user_id(user_id)

    async def get_booking_by_id(self, booking_id: BookingId) -> Booking:
        """予約の詳細（参照専用）"""
        return await self._load(booking_id)

    async def _load(self, booking_id: BookingId) -> Booking:
        booking = await self._repository.find_by_id(booking_id)
        if booking is None:
            raise ResourceNotFoundException(f"Booking not found: {booking_id}")
        return booking
