from unittest.mock import AsyncMock

import pytest

from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.booking.domain.value_object import BookingId
from services.client.local_reconciled_cache import (
    CacheEntry,
    LocalReconciledCache,
    OptimisticChange,
)
from services.shared.domain.exception import StoreUnavailableException


@pytest.fixture
def reader():
    return AsyncMock()


@pytest.fixture
def cache(reader):
    return LocalReconciledCache(reader)


class TestOptimisticChanges:
    def test_pending_change_is_displayed_over_confirmed_record(
        self, cache, create_booking
    ):
        booking = create_booking()
        cache.reconcile(booking)

        cache.begin_optimistic(booking.id, BookingStatus.PROCESSING, PaymentStatus.PAID)

        view = cache.get(booking.id)
        assert view.displayed_status == BookingStatus.PROCESSING
        assert view.displayed_payment_status == PaymentStatus.PAID
        assert view.is_pending is True
        assert view.booking.status == BookingStatus.PENDING_PAYMENT
        assert cache.divergent_ids() == [booking.id]

    def test_reconcile_replaces_pending_change(self, cache, create_booking):
        cache.reconcile(create_booking())
        cache.begin_optimistic(
            BookingId(value="bk_test"), BookingStatus.PROCESSING, PaymentStatus.PAID
        )

        cache.reconcile(create_booking(status=BookingStatus.PROCESSING, revision=2))

        view = cache.get(BookingId(value="bk_test"))
        assert view.displayed_status == BookingStatus.PROCESSING
        assert view.is_pending is False
        assert cache.divergent_ids() == []

    def test_discard_restores_confirmed_record(self, cache, create_booking):
        booking = create_booking()
        cache.reconcile(booking)
        cache.begin_optimistic(booking.id, BookingStatus.CANCELLED)

        cache.discard_optimistic(booking.id)

        view = cache.get(booking.id)
        assert view.displayed_status == BookingStatus.PENDING_PAYMENT
        assert view.is_pending is False

    def test_discard_without_confirmed_record_drops_entry(self, cache):
        booking_id = BookingId(value="bk_unknown")
        cache.begin_optimistic(booking_id, BookingStatus.CANCELLED)
        assert cache.divergent_ids() == [booking_id]

        cache.discard_optimistic(booking_id)

        assert cache.get(booking_id) is None
        assert cache.divergent_ids() == []

    def test_entry_without_confirmed_record_is_not_listed(self, cache):
        cache.begin_optimistic(BookingId(value="bk_unknown"), BookingStatus.CANCELLED)

        assert cache.bookings() == []


class TestCacheEntry:
    def test_entry_without_pending_change_is_not_divergent(self, create_booking):
        entry = CacheEntry(
            confirmed=create_booking(status=BookingStatus.PROCESSING),
            pending=None,
        )

        assert entry.is_divergent is False

    def test_payment_status_mismatch_is_divergent(self, create_booking):
        entry = CacheEntry(
            confirmed=create_booking(status=BookingStatus.PROCESSING),
            pending=OptimisticChange(
                expected_status=BookingStatus.PROCESSING,
                expected_payment_status=PaymentStatus.REFUNDED,
            ),
        )

        assert entry.is_divergent is True


class TestListing:
    def test_new_booking_goes_to_front(self, cache, create_booking):
        cache.reconcile(create_booking(booking_id="bk_old"))
        cache.reconcile(create_booking(booking_id="bk_new"))

        assert [str(v.booking.id) for v in cache.bookings()] == ["bk_new", "bk_old"]

    def test_replace_all_keeps_pending_changes(self, cache, create_booking):
        cache.reconcile(create_booking(booking_id="bk_1"))
        cache.reconcile(create_booking(booking_id="bk_2"))
        cache.begin_optimistic(BookingId(value="bk_1"), BookingStatus.CANCELLED)

        cache.replace_all([create_booking(booking_id="bk_1")])

        views = cache.bookings()
        assert [str(v.booking.id) for v in views] == ["bk_1"]
        assert views[0].displayed_status == BookingStatus.CANCELLED
        assert views[0].is_pending is True

    def test_clear(self, cache, create_booking):
        cache.reconcile(create_booking())

        cache.clear()

        assert cache.bookings() == []


class TestRefresh:
    @pytest.mark.asyncio
    async def test_replaces_entries_from_store(
        self, cache, reader, create_booking, user_id
    ):
        reader.get_user_bookings.return_value = [
            create_booking(booking_id="bk_1", status=BookingStatus.CONFIRMED)
        ]

        refreshed = await cache.refresh(user_id)

        assert refreshed is True
        reader.get_user_bookings.assert_awaited_once_with(user_id)
        assert cache.get(BookingId(value="bk_1")).displayed_status == (
            BookingStatus.CONFIRMED
        )

    @pytest.mark.asyncio
    async def test_store_outage_keeps_cached_data(
        self, cache, reader, create_booking, user_id
    ):
        cache.reconcile(create_booking(booking_id="bk_1"))
        reader.get_user_bookings.side_effect = StoreUnavailableException("throttled")

        refreshed = await cache.refresh(user_id)

        assert refreshed is False
        assert [str(v.booking.id) for v in cache.bookings()] == ["bk_1"]
