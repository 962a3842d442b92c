from __future__ import annotations

from dataclasses import dataclass

from services.payment.domain.enum import AuthorizationStatus


@dataclass(frozen=True)
class AuthorizationResult:
    """承認フローの結果（authorized / cancelled / failed のいずれか1つ）"""

    status: AuthorizationStatus
    reference: str | None = None
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.status == AuthorizationStatus.AUTHORIZED and not self.reference:
            raise ValueError("An authorized result requires a payment reference")

    @classmethod
    def authorized(cls, reference: str) -> AuthorizationResult:
        return cls(status=AuthorizationStatus.AUTHORIZED, reference=reference)

    @classmethod
    def cancelled(cls) -> AuthorizationResult:
        return cls(status=AuthorizationStatus.CANCELLED)

    @classmethod
    def failed(cls, reason: str) -> AuthorizationResult:
        return cls(status=AuthorizationStatus.FAILED, reason=reason)
