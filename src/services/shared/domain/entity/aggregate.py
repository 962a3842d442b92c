from typing import TypeVar

from .entity import Entity

ID = TypeVar("ID")


class AggregateRoot(Entity[ID]):
    """AggregateRoot 基底クラス

    - 配下のエンティティへのアクセスは必ず集約ルートを経由
    - トランザクション境界 = 集約境界
    - revision は永続化のたびに 1 ずつ増える楽観ロック用のバージョン
    """

    def __init__(self, id: ID, revision: int = 0) -> None:
        super().__init__(id)
        if revision < 0:
            raise ValueError("Revision cannot be negative")
        self._revision = revision

    @property
    def revision(self) -> int:
        return self._revision

    def _bump_revision(self) -> None:
        self._revision += 1
