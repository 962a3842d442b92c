import pytest

from services.booking.domain.enum import TravelerType
from services.shared.domain.exception import ValidationException


class TestTraveler:
    def test_complete_traveler_is_valid(self, create_traveler):
        create_traveler().validate(0)

    def test_missing_name_names_the_field(self, create_traveler):
        traveler = create_traveler(name="  ")
        with pytest.raises(ValidationException) as exc_info:
            traveler.validate(1)
        assert exc_info.value.field == "travelers[1].name"

    def test_missing_passport_number(self, create_traveler):
        traveler = create_traveler(passport_number=None)
        with pytest.raises(ValidationException, match="passport number is required"):
            traveler.validate(0)

    def test_short_passport_number(self, create_traveler):
        traveler = create_traveler(passport_number="AB123")
        with pytest.raises(ValidationException) as exc_info:
            traveler.validate(0)
        assert exc_info.value.field == "travelers[0].passport_number"

    def test_adult_must_be_at_least_12(self, create_traveler):
        traveler = create_traveler(age=11, type=TravelerType.ADULT)
        with pytest.raises(ValidationException, match="adult must be 12\\+"):
            traveler.validate(0)

    def test_child_can_be_younger_than_12(self, create_traveler):
        create_traveler(age=8, type=TravelerType.CHILD).validate(0)
