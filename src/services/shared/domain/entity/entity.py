from abc import ABC
from typing import Generic, TypeVar

ID = TypeVar("ID")


class Entity(ABC, Generic[ID]):
    """識別子で同一性を判定するエンティティの基底クラス

    予約 (Booking) とパッケージ (TravelPackage) が同じ文字列IDを持っても
    別物として扱うため、型も一致した場合にだけ等しいとみなす。
    """

    def __init__(self, id: ID) -> None:
        if id is None:
            raise ValueError(f"{type(self).__name__} requires an id")
        self._id = id

    @property
    def id(self) -> ID:
        return self._id

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r})"
