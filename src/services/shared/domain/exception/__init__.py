from .exceptions import (
    AlreadyInProgressException,
    BusinessRuleViolationException,
    DomainException,
    DuplicateResourceException,
    InvalidStateException,
    OptimisticLockException,
    PackageUnavailableException,
    PaymentAuthorizedButNotConfirmedException,
    PaymentGatewayException,
    ResourceNotFoundException,
    StoreUnavailableException,
    ValidationException,
)

__all__ = [
    "DomainException",
    "ValidationException",
    "ResourceNotFoundException",
    "BusinessRuleViolationException",
    "InvalidStateException",
    "OptimisticLockException",
    "DuplicateResourceException",
    "PackageUnavailableException",
    "AlreadyInProgressException",
    "PaymentAuthorizedButNotConfirmedException",
    "PaymentGatewayException",
    "StoreUnavailableException",
]
