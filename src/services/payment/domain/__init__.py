from .entity import PaymentAttempt as PaymentAttempt
from .enum import AuthorizationStatus as AuthorizationStatus
from .gateway import PaymentGateway as PaymentGateway
from .value_object import AuthorizationResult as AuthorizationResult
from .value_object import PaymentIntent as PaymentIntent
from .value_object import PaymentOutcome as PaymentOutcome
