import os
from decimal import Decimal

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from services.booking.domain.entity import Booking
from services.booking.domain.enum import BookingStatus, PaymentStatus, TravelerType
from services.booking.domain.repository import BookingRepository
from services.booking.domain.value_object import (
    BookingId,
    PartyComposition,
    StatusHistoryEntry,
    Traveler,
    TravelPeriod,
)
from services.shared.domain import Currency, IsoDateTime, Money, UserId
from services.shared.domain.exception.exceptions import (
    DuplicateResourceException,
    OptimisticLockException,
)
from services.shared.infrastructure import call_table, error_code


class DynamoDBBookingRepository(BookingRepository):
    """DynamoDBを使用したBookingRepository の具象実装

    旅行者とステータス履歴は JSON 文字列ではなく Map のリストとして保存する。
    """

    def __init__(self, table_name: str | None = None) -> None:
        self.table_name = table_name or os.getenv("TABLE_NAME")
        self.dynamodb = boto3.resource("dynamodb")
        self.table = self.dynamodb.Table(self.table_name)

    async def next_identity(self) -> BookingId:
        return BookingId.generate()

    async def save(self, booking: Booking) -> None:
        """予約をDBに保存する"""
        item = {
            "PK": f"BOOKING#{booking.id}",
            "SK": "BOOKING",
            "entity_type": "BOOKING",
            "booking_id": str(booking.id),
            "user_id": str(booking.user_id),
            "package_id": booking.package_id,
            "package_title": booking.package_title,
            "destination": booking.destination,
            "departure_date": booking.travel_period.departure_date,
            "return_date": booking.travel_period.return_date,
            "adults_count": booking.party.adults,
            "children_count": booking.party.children,
            "infants_count": booking.party.infants,
            "travelers": [self._traveler_to_item(t) for t in booking.travelers],
            "total_price": str(booking.total_price.amount),
            "currency": str(booking.total_price.currency),
            "selected_addons": list(booking.selected_addons),
            "is_work_trip": booking.is_work_trip,
            "company_name": booking.company_name,
            "tax_id": booking.tax_id,
            "special_requests": booking.special_requests,
            "status": booking.status.value,
            "payment_status": booking.payment_status.value,
            "payment_id": booking.payment_id,
            "refund_id": booking.refund_id,
            "status_history": [
                self._history_to_item(e) for e in booking.status_history
            ],
            "revision": booking.revision,
            "created_at": str(booking.created_at),
            "updated_at": str(booking.updated_at),
            "GSI1PK": f"USER#{booking.user_id}",
            "GSI1SK": f"BOOKING#{booking.created_at}",
        }
        try:
            await call_table(
                self.table.put_item,
                Item=item,
                ConditionExpression=Attr("PK").not_exists(),
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise DuplicateResourceException(
                    f"Booking already exists: {booking.id}"
                ) from e
            raise

    async def find_by_id(self, booking_id: BookingId) -> Booking | None:
        """予約IDで検索"""
        response = await call_table(
            self.table.get_item,
            Key={"PK": f"BOOKING#{booking_id}", "SK": "BOOKING"},
            ConsistentRead=True,
        )
        item = response.get("Item")
        if not item:
            return None
        return self._to_entity(item)

    async def find_by_user_id(self, user_id: UserId) -> list[Booking]:
        """ユーザーIDで予約を新しい順に検索する"""
        kwargs: dict = {
            "IndexName": "GSI1",
            "KeyConditionExpression": Key("GSI1PK").eq(f"USER#{user_id}")
            & Key("GSI1SK").begins_with("BOOKING#"),
            "ScanIndexForward": False,
        }
        bookings: list[Booking] = []
        while True:
            response = await call_table(self.table.query, **kwargs)
            bookings.extend(self._to_entity(i) for i in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return bookings
            kwargs["ExclusiveStartKey"] = last_key

    async def update(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        expected_revision: int,
    ) -> None:
        """ステータス・決済状態・履歴・リビジョンを1回の条件付き書き込みで更新する

        履歴は読み込み後に追記された分だけを list_append する（返金の記録のように
        ステータスが変わらない更新では履歴を書き込まない）。
        """
        if booking.revision <= expected_revision:
            return
        new_entries = booking.appended_history

        update_expression = (
            "SET #status = :status, payment_status = :payment_status, "
            "payment_id = :payment_id, refund_id = :refund_id, "
            "updated_at = :updated_at, revision = :revision"
        )
        values = {
            ":status": booking.status.value,
            ":payment_status": booking.payment_status.value,
            ":payment_id": booking.payment_id,
            ":refund_id": booking.refund_id,
            ":updated_at": str(booking.updated_at),
            ":revision": booking.revision,
        }
        if new_entries:
            update_expression += (
                ", status_history = list_append(status_history, :entries)"
            )
            values[":entries"] = [self._history_to_item(e) for e in new_entries]

        try:
            await call_table(
                self.table.update_item,
                Key={"PK": f"BOOKING#{booking.id}", "SK": "BOOKING"},
                UpdateExpression=update_expression,
                ConditionExpression=Attr("status").eq(expected_status.value)
                & Attr("revision").eq(expected_revision),
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues=values,
            )
        except ClientError as e:
            if error_code(e) == "ConditionalCheckFailedException":
                raise OptimisticLockException(
                    f"Booking status conflict: "
                    f"expected {expected_status.value} (revision {expected_revision}), "
                    f"booking_id={booking.id}",
                    current=None,
                    target=booking.status.value,
                ) from e
            raise

    @staticmethod
    def _traveler_to_item(traveler: Traveler) -> dict:
        return {
            "id": traveler.id,
            "name": traveler.name,
            "age": traveler.age,
            "type": traveler.type.value,
            "passport_number": traveler.passport_number,
        }

    @staticmethod
    def _history_to_item(entry: StatusHistoryEntry) -> dict:
        item = {"status": entry.status.value, "date": str(entry.date)}
        if entry.note:
            item["note"] = entry.note
        return item

    def _to_entity(self, item: dict) -> Booking:
        """DynamoDB アイテムをドメインエンティティに変換する"""
        created_at = IsoDateTime.from_string(item["created_at"])
        return Booking(
            id=BookingId(value=item["booking_id"]),
            user_id=UserId(value=item["user_id"]),
            package_id=item["package_id"],
            package_title=item.get("package_title", ""),
            destination=item.get("destination", ""),
            travel_period=TravelPeriod(
                departure_date=item["departure_date"],
                return_date=item["return_date"],
            ),
            party=PartyComposition(
                adults=int(item["adults_count"]),
                children=int(item.get("children_count", 0)),
                infants=int(item.get("infants_count", 0)),
            ),
            travelers=tuple(
                Traveler(
                    id=t["id"],
                    name=t["name"],
                    age=int(t["age"]),
                    type=TravelerType(t["type"]),
                    passport_number=t.get("passport_number"),
                )
                for t in item.get("travelers", [])
            ),
            total_price=Money(
                amount=Decimal(item["total_price"]),
                currency=Currency(item["currency"]),
            ),
            created_at=created_at,
            updated_at=IsoDateTime.from_string(
                item.get("updated_at") or item["created_at"]
            ),
            status=BookingStatus(item["status"]),
            payment_status=PaymentStatus(item["payment_status"]),
            payment_id=item.get("payment_id"),
            refund_id=item.get("refund_id"),
            status_history=tuple(
                StatusHistoryEntry(
                    status=BookingStatus(e["status"]),
                    date=IsoDateTime.from_string(e["date"]),
                    note=e.get("note"),
                )
                for e in item.get("status_history", [])
            ),
            selected_addons=tuple(item.get("selected_addons", [])),
            is_work_trip=bool(item.get("is_work_trip", False)),
            company_name=item.get("company_name"),
            tax_id=item.get("tax_id"),
            special_requests=item.get("special_requests"),
            revision=int(item.get("revision", 1)),
        )
