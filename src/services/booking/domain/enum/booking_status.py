from __future__ import annotations

from enum import Enum


class BookingStatus(str, Enum):
    """予約ステータス"""

    PENDING_PAYMENT = "pending_payment"
    PROCESSING = "processing"
    DOCUMENTS_VERIFIED = "documents_verified"
    VISA_SUBMITTED = "visa_submitted"
    VISA_APPROVED = "visa_approved"
    READY_TO_FLY = "ready_to_fly"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """これ以上遷移しないステータスかどうか"""
        return not _TRANSITIONS[self]

    @property
    def is_cancellable(self) -> bool:
        """利用者・管理者がキャンセルできるステータスかどうか"""
        return self in _CANCELLABLE

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in _TRANSITIONS[self]


_CANCELLABLE = frozenset(
    {
        BookingStatus.PENDING_PAYMENT,
        BookingStatus.PROCESSING,
        BookingStatus.DOCUMENTS_VERIFIED,
        BookingStatus.VISA_SUBMITTED,
        BookingStatus.VISA_APPROVED,
    }
)

# 状態遷移表。ここにない遷移はすべて InvalidStateException になる
_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING_PAYMENT: frozenset(
        {BookingStatus.PROCESSING, BookingStatus.CANCELLED, BookingStatus.FAILED}
    ),
    BookingStatus.PROCESSING: frozenset(
        {
            BookingStatus.DOCUMENTS_VERIFIED,
            BookingStatus.VISA_SUBMITTED,
            BookingStatus.CANCELLED,
            BookingStatus.REFUNDED,
        }
    ),
    BookingStatus.DOCUMENTS_VERIFIED: frozenset(
        {
            BookingStatus.VISA_SUBMITTED,
            BookingStatus.CANCELLED,
            BookingStatus.REFUNDED,
        }
    ),
    BookingStatus.VISA_SUBMITTED: frozenset(
        {
            BookingStatus.VISA_APPROVED,
            BookingStatus.CANCELLED,
            BookingStatus.REFUNDED,
        }
    ),
    BookingStatus.VISA_APPROVED: frozenset(
        {
            BookingStatus.READY_TO_FLY,
            BookingStatus.CANCELLED,
            BookingStatus.REFUNDED,
        }
    ),
    BookingStatus.READY_TO_FLY: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REFUNDED: frozenset(),
    BookingStatus.FAILED: frozenset(),
}
