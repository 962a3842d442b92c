import os
from decimal import Decimal

import boto3

from services.booking.domain.entity import TravelPackage
from services.booking.domain.repository import PackageRepository
from services.shared.domain import Currency, Money
from services.shared.infrastructure import call_table


class DynamoDBPackageRepository(PackageRepository):
    """DynamoDBを使用したPackageRepository の具象実装（参照のみ）"""

    def __init__(
        self, table_name: str | None = None, default_currency: str | None = None
    ) -> None:
        self.table_name = (
            table_name or os.getenv("PACKAGE_TABLE_NAME") or os.getenv("TABLE_NAME")
        )
        self.default_currency = (
            default_currency or os.getenv("BOOKING_CURRENCY") or "USD"
        )
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(self.table_name)

    async def find_by_id(self, package_id: str) -> TravelPackage | None:
        """パッケージIDで検索"""
        response = await call_table(
            self.table.get_item,
            Key={"PK": f"PACKAGE#{package_id}", "SK": "PACKAGE"},
        )
        item = response.get("Item")
        if not item:
            return None
        return self._to_entity(item)

    def _to_entity(self, item: dict) -> TravelPackage:
        return TravelPackage(
            id=item["package_id"],
            title=item.get("title", ""),
            destination=item.get("destination", ""),
            price=Money(
                amount=Decimal(str(item.get("price", "0"))),
                currency=Currency(item.get("currency") or self.default_currency),
            ),
            is_active=bool(item.get("is_active", False)),
        )
