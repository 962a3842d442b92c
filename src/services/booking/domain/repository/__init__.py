from .booking_repository import BookingRepository
from .package_repository import PackageRepository

__all__ = ["BookingRepository", "PackageRepository"]
