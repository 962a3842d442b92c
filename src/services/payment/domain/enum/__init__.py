from .authorization_status import AuthorizationStatus

__all__ = ["AuthorizationStatus"]
