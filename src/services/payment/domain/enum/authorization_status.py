from enum import Enum


class AuthorizationStatus(str, Enum):
    """決済承認フローの結果"""

    AUTHORIZED = "authorized"
    CANCELLED = "cancelled"
    FAILED = "failed"
