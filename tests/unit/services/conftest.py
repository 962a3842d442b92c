import asyncio
import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

# ハンドラーはインポート時に boto3 のリソースを生成するため、先に設定しておく
os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-1")
os.environ.setdefault("TABLE_NAME", "test-bookings")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "booking-test")

from services.booking.applications.booking_service import BookingService  # noqa: E402
from services.booking.domain.entity import Booking, TravelPackage  # noqa: E402
from services.booking.domain.enum import (  # noqa: E402
    BookingStatus,
    PaymentStatus,
    TravelerType,
)
from services.booking.domain.factory import BookingFactory, BookingPayload  # noqa: E402
from services.booking.domain.value_object import (  # noqa: E402
    BookingId,
    PartyComposition,
    StatusHistoryEntry,
    Traveler,
    TravelPeriod,
)
from services.booking.infrastructure.in_memory_booking_repository import (  # noqa: E402
    InMemoryBookingRepository,
    InMemoryPackageRepository,
)
from services.payment.domain.gateway import PaymentGateway  # noqa: E402
from services.payment.domain.value_object import (  # noqa: E402
    AuthorizationResult,
    PaymentIntent,
)
from services.shared.domain import IsoDateTime, Money, UserId  # noqa: E402

# ステータスごとの整合する決済状態
_PAYMENT_STATUS_FOR = {
    BookingStatus.PENDING_PAYMENT: PaymentStatus.PENDING,
    BookingStatus.CANCELLED: PaymentStatus.PENDING,
    BookingStatus.FAILED: PaymentStatus.FAILED,
}


class FakeClock:
    """テストから進められる時計"""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> IsoDateTime:
        return IsoDateTime(value=self.current)

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@dataclass
class FakeLambdaContext:
    function_name: str = "test-function"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = (
        "arn:aws:lambda:ap-northeast-1:123456789012:function:test-function"
    )
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"


class FakePaymentGateway(PaymentGateway):
    """呼び出しを記録し、指定した承認結果を返すゲートウェイ"""

    def __init__(self, result: AuthorizationResult | None = None) -> None:
        self.result = result or AuthorizationResult.authorized("pay_1")
        self.created: list[tuple[Money, str]] = []
        self.release: asyncio.Event | None = None

    async def create_intent(self, amount: Money, order_ref: str) -> PaymentIntent:
        self.created.append((amount, order_ref))
        return PaymentIntent(
            intent_id=f"int_{len(self.created)}",
            client_secret="secret",
            amount=amount,
            order_ref=order_ref,
        )

    async def present_authorization(self, intent: PaymentIntent) -> AuthorizationResult:
        # release が設定されていれば、テスト側が set するまで承認待ちのままにする
        if self.release is not None:
            await self.release.wait()
        return self.result


@pytest.fixture
def user_id():
    """全テスト共通の UserId フィクスチャ"""
    return UserId(value="user-123")


@pytest.fixture
def now():
    return IsoDateTime(value=datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def travel_package():
    return TravelPackage(
        id="pkg-bali",
        title="Bali Escape",
        destination="Bali, Indonesia",
        price=Money.of("1200", "USD"),
    )


@pytest.fixture
def create_traveler():
    """Traveler を生成する Factory fixture（Factories as fixtures パターン）"""

    def _factory(
        traveler_id: str = "t-1",
        name: str = "Aiko Tanaka",
        age: int = 34,
        type: TravelerType = TravelerType.ADULT,
        passport_number: str | None = "TK1234567",
    ) -> Traveler:
        return Traveler(
            id=traveler_id,
            name=name,
            age=age,
            type=type,
            passport_number=passport_number,
        )

    return _factory


@pytest.fixture
def create_payload(create_traveler):
    """予約作成の入力（大人2名）を生成する Factory fixture"""

    def _factory(**overrides) -> BookingPayload:
        payload: BookingPayload = {
            "user_id": "user-123",
            "package_id": "pkg-bali",
            "package_title": "Bali Escape",
            "destination": "Bali, Indonesia",
            "departure_date": "2026-03-01",
            "return_date": "2026-03-08",
            "adults_count": 2,
            "children_count": 0,
            "infants_count": 0,
            "travelers": [
                create_traveler(traveler_id="t-1", name="Aiko Tanaka"),
                create_traveler(
                    traveler_id="t-2", name="Ken Tanaka", passport_number="TK7654321"
                ),
            ],
            "total_price": Decimal("2400"),
            "currency": "USD",
            "selected_addons": [],
            "is_work_trip": False,
            "company_name": None,
            "tax_id": None,
            "special_requests": None,
        }
        payload.update(overrides)
        return payload

    return _factory


@pytest.fixture
def create_booking(create_traveler):
    """任意のステータスの Booking を生成する Factory fixture"""

    def _factory(
        status: BookingStatus = BookingStatus.PENDING_PAYMENT,
        booking_id: str = "bk_test",
        user_id: str = "user-123",
        payment_id: str | None = None,
        departure_date: str = "2026-03-01",
        return_date: str = "2026-03-08",
        created_at: str = "2026-01-10T09:00:00+00:00",
        revision: int = 1,
    ) -> Booking:
        payment_status = _PAYMENT_STATUS_FOR.get(status, PaymentStatus.PAID)
        if payment_status == PaymentStatus.PAID and payment_id is None:
            payment_id = "int_paid"
        timestamp = IsoDateTime.from_string(created_at)
        return Booking(
            id=BookingId(value=booking_id),
            user_id=UserId(value=user_id),
            package_id="pkg-bali",
            package_title="Bali Escape",
            destination="Bali, Indonesia",
            travel_period=TravelPeriod(
                departure_date=departure_date, return_date=return_date
            ),
            party=PartyComposition(adults=1),
            travelers=(create_traveler(),),
            total_price=Money.of("1200", "USD"),
            created_at=timestamp,
            status=status,
            payment_status=payment_status,
            payment_id=payment_id,
            status_history=(StatusHistoryEntry(status=status, date=timestamp),),
            revision=revision,
        )

    return _factory


@pytest.fixture
def booking_repository():
    return InMemoryBookingRepository()


@pytest.fixture
def package_repository(travel_package):
    return InMemoryPackageRepository([travel_package])


@pytest.fixture
def booking_service(booking_repository, package_repository, clock):
    return BookingService(
        repository=booking_repository,
        package_repository=package_repository,
        factory=BookingFactory(),
        clock=clock,
    )


@pytest.fixture
def lambda_context():
    return FakeLambdaContext()


@pytest.fixture
def create_http_event():
    """API Gateway HTTP API (v2) のイベントを生成する Factory fixture"""

    def _factory(
        route_key: str,
        body: dict | None = None,
        path_parameters: dict | None = None,
    ) -> dict:
        method, path = route_key.split(" ", 1)
        return {
            "version": "2.0",
            "routeKey": route_key,
            "rawPath": path,
            "rawQueryString": "",
            "headers": {"content-type": "application/json"},
            "pathParameters": path_parameters or {},
            "requestContext": {
                "http": {"method": method, "path": path},
                "requestId": "req-1",
                "stage": "$default",
            },
            "body": json.dumps(body) if body is not None else None,
            "isBase64Encoded": False,
        }

    return _factory


@pytest.fixture
def gateway():
    return FakePaymentGateway()
