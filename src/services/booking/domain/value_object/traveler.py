from dataclasses import dataclass
from typing import ClassVar

from services.booking.domain.enum import TravelerType
from services.shared.domain.exception import ValidationException


@dataclass(frozen=True)
class Traveler:
    """旅行者

    下書き段階では未入力の項目を持ちうるため、生成時には検証しない。
    予約作成時に validate() で完全性を確認する。
    """

    MIN_PASSPORT_LENGTH: ClassVar[int] = 6
    ADULT_MIN_AGE: ClassVar[int] = 12

    id: str
    name: str
    age: int
    type: TravelerType
    passport_number: str | None = None

    def validate(self, position: int) -> None:
        """予約に必要な項目が揃っているか検証する"""
        prefix = f"travelers[{position}]"
        if not self.name or not self.name.strip():
            raise ValidationException(
                f"Traveler #{position + 1}: name is required", field=f"{prefix}.name"
            )
        passport = (self.passport_number or "").strip()
        if not passport:
            raise ValidationException(
                f"Traveler #{position + 1}: passport number is required",
                field=f"{prefix}.passport_number",
            )
        if len(passport) < self.MIN_PASSPORT_LENGTH:
            raise ValidationException(
                f"Traveler #{position + 1}: invalid passport number",
                field=f"{prefix}.passport_number",
            )
        if self.age < 0:
            raise ValidationException(
                f"Traveler #{position + 1}: age cannot be negative",
                field=f"{prefix}.age",
            )
        if self.type == TravelerType.ADULT and self.age < self.ADULT_MIN_AGE:
            raise ValidationException(
                f"Traveler #{position + 1}: adult must be {self.ADULT_MIN_AGE}+",
                field=f"{prefix}.age",
            )
