from dataclasses import dataclass


@dataclass(frozen=True)
class PartyComposition:
    """旅行者の構成（大人・子供・幼児の人数）"""

    adults: int = 1
    children: int = 0
    infants: int = 0

    def __post_init__(self) -> None:
        if self.adults < 1:
            raise ValueError("At least one adult is required")
        if self.children < 0 or self.infants < 0:
            raise ValueError("Traveler counts cannot be negative")

    @property
    def total(self) -> int:
        return self.adults + self.children + self.infants
