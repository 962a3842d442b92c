import copy

from services.booking.domain.entity import Booking, TravelPackage
from services.booking.domain.enum import BookingStatus
from services.booking.domain.repository import BookingRepository, PackageRepository
from services.booking.domain.value_object import BookingId
from services.shared.domain import UserId
from services.shared.domain.exception import (
    DuplicateResourceException,
    OptimisticLockException,
)


class InMemoryBookingRepository(BookingRepository):
    """メモリ上の BookingRepository（ローカル実行・テスト用）

    取り出した予約を書き換えてもストアの値が変わらないよう、出し入れのたびに複製する。
    """

    def __init__(self) -> None:
        self._bookings: dict[BookingId, Booking] = {}

    async def next_identity(self) -> BookingId:
        return BookingId.generate()

    async def save(self, booking: Booking) -> None:
        if booking.id in self._bookings:
            raise DuplicateResourceException(f"Booking already exists: {booking.id}")
        self._bookings[booking.id] = copy.deepcopy(booking)

    async def find_by_id(self, booking_id: BookingId) -> Booking | None:
        booking = self._bookings.get(booking_id)
        return copy.deepcopy(booking) if booking is not None else None

    async def find_by_user_id(self, user_id: UserId) -> list[Booking]:
        bookings = [b for b in self._bookings.values() if b.user_id == user_id]
        bookings.sort(key=lambda b: b.created_at.value, reverse=True)
        return [copy.deepcopy(b) for b in bookings]

    async def update(
        self,
        booking: Booking,
        expected_status: BookingStatus,
        expected_revision: int,
    ) -> None:
        stored = self._bookings.get(booking.id)
        if (
            stored is None
            or stored.status != expected_status
            or stored.revision != expected_revision
        ):
            raise OptimisticLockException(
                f"Booking status conflict: "
                f"expected {expected_status.value} (revision {expected_revision}), "
                f"booking_id={booking.id}",
                current=stored.status.value if stored else None,
                target=booking.status.value,
            )
        self._bookings[booking.id] = copy.deepcopy(booking)


class InMemoryPackageRepository(PackageRepository):
    """メモリ上の PackageRepository（ローカル実行・テスト用）"""

    def __init__(self, packages: list[TravelPackage] | None = None) -> None:
        self._packages = {p.id: p for p in packages or []}

    def add(self, package: TravelPackage) -> None:
        self._packages[package.id] = package

    async def find_by_id(self, package_id: str) -> TravelPackage | None:
        return self._packages.get(package_id)
