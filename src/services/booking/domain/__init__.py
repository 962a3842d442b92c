from .entity import Booking as Booking
from .entity import TravelPackage as TravelPackage
from .enum import BookingStatus as BookingStatus
from .enum import PaymentStatus as PaymentStatus
from .enum import TravelerType as TravelerType
from .factory import BookingFactory as BookingFactory
from .factory import BookingPayload as BookingPayload
from .repository import BookingRepository as BookingRepository
from .repository import PackageRepository as PackageRepository
from .value_object import BookingDraft as BookingDraft
from .value_object import BookingId as BookingId
from .value_object import PartyComposition as PartyComposition
from .value_object import StatusHistoryEntry as StatusHistoryEntry
from .value_object import Traveler as Traveler
from .value_object import TravelPeriod as TravelPeriod
