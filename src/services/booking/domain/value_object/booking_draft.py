from dataclasses import dataclass, field
from datetime import date

from services.booking.domain.value_object.traveler import Traveler
from services.shared.domain import Money
from services.shared.domain.exception import ValidationException


@dataclass(frozen=True)
class BookingDraft:
    """予約フォームの下書き（クライアント所有・送信までの一時データ）

    各ステップは dataclasses.replace で新しい下書きを返し、既存の値は変更しない。
    """

    package_id: str | None = None
    package_title: str | None = None
    destination: str | None = None
    package_price: Money | None = None
    departure_date: date | None = None
    return_date: date | None = None
    adults_count: int = 1
    children_count: int = 0
    infants_count: int = 0
    travelers: tuple[Traveler, ...] = ()
    selected_addons: tuple[str, ...] = ()
    is_work_trip: bool = False
    company_name: str | None = None
    tax_id: str | None = None
    special_requests: str | None = None
    total_price: Money | None = None
    currency: str = "USD"
    current_step: int = field(default=0, compare=False)

    @property
    def expected_traveler_count(self) -> int:
        return self.adults_count + self.children_count + self.infants_count

    def is_submittable(self) -> bool:
        """旅行者の人数と入力内容が揃っているか"""
        if len(self.travelers) != self.expected_traveler_count:
            return False
        try:
            for position, traveler in enumerate(self.travelers):
                traveler.validate(position)
        except ValidationException:
            return False
        return True
