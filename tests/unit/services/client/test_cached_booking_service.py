import pytest

from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.client.cached_booking_service import CachedBookingService
from services.client.local_reconciled_cache import LocalReconciledCache
from services.shared.domain.exception import (
    InvalidStateException,
    StoreUnavailableException,
    ValidationException,
)


@pytest.fixture
def cache(booking_service):
    return LocalReconciledCache(booking_service)


@pytest.fixture
def cached_service(booking_service, cache):
    return CachedBookingService(booking_service, cache)


class TestCachedBookingService:
    @pytest.mark.asyncio
    async def test_created_booking_is_cached(
        self, cached_service, cache, create_payload
    ):
        booking = await cached_service.create_booking(create_payload())

        view = cache.get(booking.id)
        assert view.displayed_status == BookingStatus.PENDING_PAYMENT
        assert view.is_pending is False

    @pytest.mark.asyncio
    async def test_confirmed_payment_replaces_optimistic_view(
        self, cached_service, cache, create_payload
    ):
        booking = await cached_service.create_booking(create_payload())

        confirmed = await cached_service.confirm_booking_payment(booking.id, "pay_1")

        view = cache.get(booking.id)
        assert view.booking is confirmed
        assert view.displayed_status == BookingStatus.PROCESSING
        assert view.displayed_payment_status == PaymentStatus.PAID
        assert view.is_pending is False

    @pytest.mark.asyncio
    async def test_failed_confirmation_rolls_back_view(
        self, cached_service, booking_service, cache, create_payload, monkeypatch
    ):
        booking = await cached_service.create_booking(create_payload())

        async def unavailable(booking_id, payment_reference):
            raise StoreUnavailableException("throttled")

        monkeypatch.setattr(booking_service, "confirm_booking_payment", unavailable)

        with pytest.raises(StoreUnavailableException):
            await cached_service.confirm_booking_payment(booking.id, "pay_1")

        view = cache.get(booking.id)
        assert view.displayed_status == BookingStatus.PENDING_PAYMENT
        assert view.is_pending is False
        assert cache.divergent_ids() == []

    @pytest.mark.asyncio
    async def test_cancel_paid_booking_shows_refund(
        self, cached_service, cache, create_payload
    ):
        booking = await cached_service.create_booking(create_payload())
        await cached_service.confirm_booking_payment(booking.id, "pay_1")

        cancelled = await cached_service.cancel_booking(booking.id, "Change of plans")

        assert cancelled.status == BookingStatus.REFUNDED
        assert cache.get(booking.id).displayed_status == BookingStatus.REFUNDED

    @pytest.mark.asyncio
    async def test_rejected_cancel_keeps_confirmed_view(
        self, cached_service, cache, create_payload
    ):
        booking = await cached_service.create_booking(create_payload())
        await cached_service.confirm_booking_payment(booking.id, "pay_1")

        with pytest.raises(ValidationException):
            await cached_service.cancel_booking(booking.id, None)

        view = cache.get(booking.id)
        assert view.displayed_status == BookingStatus.PROCESSING
        assert view.is_pending is False

    @pytest.mark.asyncio
    async def test_invalid_transition_is_not_cached(
        self, cached_service, cache, create_payload
    ):
        booking = await cached_service.create_booking(create_payload())

        with pytest.raises(InvalidStateException):
            await cached_service.update_status(booking.id, BookingStatus.COMPLETED)

        assert cache.get(booking.id).displayed_status == BookingStatus.PENDING_PAYMENT

    @pytest.mark.asyncio
    async def test_user_bookings_replace_cache(
        self, cached_service, booking_service, cache, create_payload, user_id
    ):
        created = await booking_service.create_booking(create_payload())

        bookings = await cached_service.get_user_bookings(user_id)

        assert [b.id for b in bookings] == [created.id]
        assert [v.booking.id for v in cache.bookings()] == [created.id]
