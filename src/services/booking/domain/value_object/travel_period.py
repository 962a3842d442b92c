from dataclasses import dataclass
from datetime import date
from functools import cached_property


@dataclass(frozen=True)
class TravelPeriod:
    """旅行期間(出発日 + 帰着日)"""

    departure_date: str
    return_date: str

    def __post_init__(self) -> None:
        try:
            departure = self._departure
            return_ = self._return
        except ValueError as e:
            raise ValueError(f"Invalid date format: {e}") from e

        if return_ <= departure:
            raise ValueError("Return date must be after departure date")

    @cached_property
    def _departure(self) -> date:
        return date.fromisoformat(self.departure_date)

    @cached_property
    def _return(self) -> date:
        return date.fromisoformat(self.return_date)

    def days(self) -> int:
        """旅行日数（泊数）を計算する"""
        return (self._return - self._departure).days

    def has_ended(self, today: date) -> bool:
        """帰着日を過ぎているか"""
        return today >= self._return
