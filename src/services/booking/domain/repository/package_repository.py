from abc import ABC, abstractmethod

from services.booking.domain.entity import TravelPackage


class PackageRepository(ABC):
    """パッケージカタログの参照用インターフェース"""

    @abstractmethod
    async def find_by_id(self, package_id: str) -> TravelPackage | None:
        """パッケージIDで検索する"""
        raise NotImplementedError
