from datetime import date
from decimal import Decimal

import pytest

from services.booking.applications.draft_builder import BookingDraftBuilder
from services.booking.domain.factory import BookingFactory
from services.booking.domain.value_object import BookingId
from services.shared.domain import Money
from services.shared.domain.exception import ValidationException


@pytest.fixture
def builder():
    return BookingDraftBuilder()


@pytest.fixture
def complete_draft(builder, travel_package, create_traveler):
    draft = builder.init_draft(travel_package, {"adults": 2})
    draft = builder.set_dates(draft, date(2026, 3, 1), date(2026, 3, 8))
    draft = builder.set_travelers(
        draft,
        [
            create_traveler(traveler_id="t-1"),
            create_traveler(traveler_id="t-2", passport_number="TK7654321"),
        ],
    )
    return builder.set_total_price(draft, Decimal("2400"))


class TestInitDraft:
    def test_defaults_to_one_adult(self, builder, travel_package):
        draft = builder.init_draft(travel_package)

        assert draft.package_id == "pkg-bali"
        assert draft.package_price == Money.of("1200", "USD")
        assert draft.destination == "Bali, Indonesia"
        assert (draft.adults_count, draft.children_count, draft.infants_count) == (
            1,
            0,
            0,
        )
        assert draft.currency == "USD"

    def test_seeds_counts_and_dates_from_search(self, builder, travel_package):
        draft = builder.init_draft(
            travel_package,
            {
                "adults": 2,
                "children": 1,
                "departure_date": date(2026, 3, 1),
                "return_date": date(2026, 3, 8),
            },
        )

        assert draft.adults_count == 2
        assert draft.children_count == 1
        assert draft.departure_date == date(2026, 3, 1)


class TestDraftSteps:
    def test_steps_return_new_drafts(self, builder, travel_package):
        draft = builder.init_draft(travel_package)

        updated = builder.set_addons(draft, ["insurance", "transfer", "insurance"])

        assert draft.selected_addons == ()
        assert updated.selected_addons == ("insurance", "transfer")

    def test_return_date_must_follow_departure(self, builder, travel_package):
        draft = builder.init_draft(travel_package)
        with pytest.raises(ValidationException):
            builder.set_dates(draft, date(2026, 3, 8), date(2026, 3, 8))

    def test_set_travelers_does_not_enforce_count(
        self, builder, travel_package, create_traveler
    ):
        draft = builder.init_draft(travel_package, {"adults": 3})

        draft = builder.set_travelers(draft, [create_traveler()])

        assert len(draft.travelers) == 1
        assert draft.is_submittable() is False

    def test_shrinking_party_drops_extra_travelers(self, builder, complete_draft):
        draft = builder.set_party(complete_draft, adults=1)

        assert draft.adults_count == 1
        assert len(draft.travelers) == 1

    def test_party_needs_an_adult(self, builder, complete_draft):
        with pytest.raises(ValidationException):
            builder.set_party(complete_draft, adults=0, children=2)

    def test_clear_work_trip(self, builder, complete_draft):
        draft = builder.set_work_trip(complete_draft, "Acme Travel", "T-001")

        cleared = builder.clear_work_trip(draft)

        assert cleared.is_work_trip is False
        assert cleared.company_name is None

    def test_blank_special_requests_become_none(self, builder, complete_draft):
        draft = builder.set_special_requests(complete_draft, "   ")
        assert draft.special_requests is None

    def test_go_to_step_does_not_affect_equality(self, builder, complete_draft):
        assert builder.go_to_step(complete_draft, 3) == complete_draft


class TestToBookingPayload:
    def test_payload_is_accepted_by_factory(
        self, builder, complete_draft, now
    ):
        payload = builder.to_booking_payload(complete_draft, "user-123")

        booking = BookingFactory().create(BookingId(value="bk_1"), payload, now)

        assert payload["departure_date"] == "2026-03-01"
        assert payload["total_price"] == Decimal("2400")
        assert booking.party.total == 2

    def test_missing_total_price_is_reported(self, builder, travel_package):
        draft = builder.init_draft(travel_package)
        draft = builder.set_dates(draft, date(2026, 3, 1), date(2026, 3, 8))

        with pytest.raises(ValidationException) as exc_info:
            builder.to_booking_payload(draft, "user-123")

        assert exc_info.value.field == "total_price"

    def test_missing_dates_are_reported(self, builder, travel_package):
        draft = builder.init_draft(travel_package)

        with pytest.raises(ValidationException) as exc_info:
            builder.to_booking_payload(draft, "user-123")

        assert exc_info.value.field == "departure_date"

    def test_user_is_required(self, builder, complete_draft):
        with pytest.raises(ValidationException) as exc_info:
            builder.to_booking_payload(complete_draft, "")
        assert exc_info.value.field == "user_id"

    def test_work_trip_without_company(self, builder, complete_draft):
        draft = builder.set_work_trip(complete_draft, "")

        with pytest.raises(ValidationException) as exc_info:
            builder.to_booking_payload(draft, "user-123")

        assert exc_info.value.field == "company_name"
