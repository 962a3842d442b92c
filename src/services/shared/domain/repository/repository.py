from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")
ID = TypeVar("ID")


class Repository(ABC, Generic[T, ID]):
    """集約リポジトリの基底クラス

    ストアはネットワーク越しにあるため、操作はすべてコルーチンにする。
    ID の採番もストア側の責務とし、集約は払い出された ID で生成する。
    """

    @abstractmethod
    async def next_identity(self) -> ID:
        """新しい集約IDを払い出す"""
        raise NotImplementedError

    @abstractmethod
    async def save(self, aggregate: T) -> None:
        """新しい集約を保存する"""
        raise NotImplementedError

    @abstractmethod
    async def find_by_id(self, id: ID) -> T | None:
        """IDで集約を検索する（存在しなければ None）"""
        raise NotImplementedError
