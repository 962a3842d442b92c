from .booking import Booking
from .travel_package import TravelPackage

__all__ = ["Booking", "TravelPackage"]
