from .booking_status import BookingStatus
from .payment_status import PaymentStatus
from .traveler_type import TravelerType

__all__ = ["BookingStatus", "PaymentStatus", "TravelerType"]
