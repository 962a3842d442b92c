from .booking_factory import BookingFactory, BookingPayload

__all__ = ["BookingFactory", "BookingPayload"]
