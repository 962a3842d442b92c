from .authorization_result import AuthorizationResult
from .payment_intent import PaymentIntent
from .payment_outcome import PaymentOutcome

__all__ = ["AuthorizationResult", "PaymentIntent", "PaymentOutcome"]
