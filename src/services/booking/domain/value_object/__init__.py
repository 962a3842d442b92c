from .booking_draft import BookingDraft
from .booking_id import BookingId
from .party_composition import PartyComposition
from .status_history_entry import StatusHistoryEntry
from .travel_period import TravelPeriod
from .traveler import Traveler

__all__ = [
    "BookingId",
    "BookingDraft",
    "PartyComposition",
    "StatusHistoryEntry",
    "TravelPeriod",
    "Traveler",
]
