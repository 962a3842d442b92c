from services.booking.applications.booking_service import BookingService
from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.booking.domain.factory import BookingPayload
from services.booking.domain.value_object import BookingId
from services.client.local_reconciled_cache import LocalReconciledCache
from services.shared.domain import UserId


class CachedBookingService:
    """BookingService の結果をローカルキャッシュへ反映するラッパー

    決済確定とキャンセルは楽観的に表示してからサーバーの記録で置き換える。
    失敗した場合は楽観的な表示を取り消して例外をそのまま伝える。
    """

    def __init__(self, service: BookingService, cache: LocalReconciledCache) -> None:
        self._service = service
        self._cache = cache

    async def create_booking(self, payload: BookingPayload) -> Booking:
        booking = await self._service.create_booking(payload)
        self._cache.reconcile(booking)
        return booking

    async def confirm_booking_payment(
        self, booking_id: BookingId, payment_reference: str
    ) -> Booking:
        self._cache.begin_optimistic(
            booking_id, BookingStatus.PROCESSING, PaymentStatus.PAID
        )
        try:
            booking = await self._service.confirm_booking_payment(
                booking_id, payment_reference
            )
        except Exception:
            self._cache.discard_optimistic(booking_id)
            raise
        self._cache.reconcile(booking)
        return booking

    async def cancel_booking(self, booking_id: BookingId, reason: str | None) -> Booking:
        view = self._cache.get(booking_id)
        expected = (
            view.booking.cancellation_target if view else BookingStatus.CANCELLED
        )
        self._cache.begin_optimistic(booking_id, expected)
        try:
            booking = await self._service.cancel_booking(booking_id, reason)
        except Exception:
            self._cache.discard_optimistic(booking_id)
            raise
        self._cache.reconcile(booking)
        return booking

    async def update_status(
        self,
        booking_id: BookingId,
        target: BookingStatus,
        note: str | None = None,
    ) -> Booking:
        booking = await self._service.update_status(booking_id, target, note=note)
        self._cache.reconcile(booking)
        return booking

    async def get_user_bookings(self, user_id: UserId) -> list[Booking]:
        bookings = await self._service.get_user_bookings(user_id)
        self._cache.replace_all(bookings)
        return bookings

    async def get_booking_by_id(self, booking_id: BookingId) -> Booking:
        booking = await self._service.get_booking_by_id(booking_id)
        self._cache.reconcile(booking)
        return booking
