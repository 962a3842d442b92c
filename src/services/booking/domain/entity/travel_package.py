from services.shared.domain import Entity, Money


class TravelPackage(Entity[str]):
    """販売中のパッケージツアー（予約コンテキストからは参照のみ）"""

    def __init__(
        self,
        id: str,
        title: str,
        destination: str,
        price: Money,
        is_active: bool = True,
    ) -> None:
        super().__init__(id)
        self._title = title
        self._destination = destination
        self._price = price
        self._is_active = is_active

    @property
    def title(self) -> str:
        return self._title

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def price(self) -> Money:
        return self._price

    @property
    def is_active(self) -> bool:
        return self._is_active
