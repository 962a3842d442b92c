from services.booking.domain.enum import BookingStatus, PaymentStatus
from services.booking.domain.value_object import (
    BookingId,
    PartyComposition,
    StatusHistoryEntry,
    Traveler,
    TravelPeriod,
)
from services.shared.domain import AggregateRoot, IsoDateTime, Money, UserId
from services.shared.domain.exception import (
    BusinessRuleViolationException,
    InvalidStateException,
    ValidationException,
)

# paid のまま存在してよいステータス
_PAID_STATUSES = frozenset(
    {
        BookingStatus.PROCESSING,
        BookingStatus.DOCUMENTS_VERIFIED,
        BookingStatus.VISA_SUBMITTED,
        BookingStatus.VISA_APPROVED,
        BookingStatus.READY_TO_FLY,
        BookingStatus.COMPLETED,
        BookingStatus.REFUNDED,
    }
)

# 専用の操作（confirm_payment / cancel）でしか到達できないステータス
_DEDICATED_TARGETS = frozenset(
    {BookingStatus.PROCESSING, BookingStatus.CANCELLED, BookingStatus.REFUNDED}
)


class Booking(AggregateRoot[BookingId]):
    """パッケージツアーの予約

    状態遷移はすべてこの集約を通して行い、遷移のたびにステータス履歴へ
    1件追記してリビジョンを進める。
    """

    def __init__(
        self,
        id: BookingId,
        user_id: UserId,
        package_id: str,
        package_title: str,
        destination: str,
        travel_period: TravelPeriod,
        party: PartyComposition,
        travelers: tuple[Traveler, ...],
        total_price: Money,
        created_at: IsoDateTime,
        status: BookingStatus = BookingStatus.PENDING_PAYMENT,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        payment_id: str | None = None,
        refund_id: str | None = None,
        status_history: tuple[StatusHistoryEntry, ...] = (),
        selected_addons: tuple[str, ...] = (),
        is_work_trip: bool = False,
        company_name: str | None = None,
        tax_id: str | None = None,
        special_requests: str | None = None,
        updated_at: IsoDateTime | None = None,
        revision: int = 0,
    ) -> None:
        super().__init__(id, revision)

        self._user_id = user_id
        self._package_id = package_id
        self._package_title = package_title
        self._destination = destination
        self._travel_period = travel_period
        self._party = party
        self._travelers = tuple(travelers)
        self._total_price = total_price
        self._created_at = created_at
        self._updated_at = updated_at or created_at
        self._status = status
        self._payment_status = payment_status
        self._payment_id = payment_id
        self._refund_id = refund_id
        self._status_history = tuple(status_history) or (
            StatusHistoryEntry(status=status, date=created_at),
        )
        # 読み込み後に追記した履歴（リポジトリの条件付き書き込みで使う）
        self._appended_history: tuple[StatusHistoryEntry, ...] = ()
        self._selected_addons = tuple(selected_addons)
        self._is_work_trip = is_work_trip
        self._company_name = company_name
        self._tax_id = tax_id
        self._special_requests = special_requests

        self._validate_invariants()

    def _validate_invariants(self) -> None:
        """履歴の末尾 = 現在のステータス、paid なら支払い済みのステータス"""
        if self._status_history[-1].status != self._status:
            raise BusinessRuleViolationException(
                "Last status history entry must match the current status"
            )
        if (
            self._payment_status == PaymentStatus.PAID
            and self._status not in _PAID_STATUSES
        ):
            raise BusinessRuleViolationException(
                f"A paid booking cannot be in {self._status.value} status"
            )
        if (
            self._payment_status == PaymentStatus.REFUNDED
            and self._status != BookingStatus.REFUNDED
        ):
            raise BusinessRuleViolationException(
                "Only a refunded booking can have a refunded payment"
            )
        if (
            self._payment_status == PaymentStatus.FAILED
            and self._status != BookingStatus.FAILED
        ):
            raise BusinessRuleViolationException(
                "Only a failed booking can have a failed payment"
            )

    @property
    def user_id(self) -> UserId:
        return self._user_id

    @property
    def package_id(self) -> str:
        return self._package_id

    @property
    def package_title(self) -> str:
        return self._package_title

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def travel_period(self) -> TravelPeriod:
        return self._travel_period

    @property
    def party(self) -> PartyComposition:
        return self._party

    @property
    def travelers(self) -> tuple[Traveler, ...]:
        return self._travelers

    @property
    def total_price(self) -> Money:
        return self._total_price

    @property
    def created_at(self) -> IsoDateTime:
        return self._created_at

    @property
    def updated_at(self) -> IsoDateTime:
        return self._updated_at

    @property
    def status(self) -> BookingStatus:
        return self._status

    @property
    def payment_status(self) -> PaymentStatus:
        return self._payment_status

    @property
    def payment_id(self) -> str | None:
        return self._payment_id

    @property
    def refund_id(self) -> str | None:
        return self._refund_id

    @property
    def status_history(self) -> tuple[StatusHistoryEntry, ...]:
        return self._status_history

    @property
    def appended_history(self) -> tuple[StatusHistoryEntry, ...]:
        return self._appended_history

    @property
    def selected_addons(self) -> tuple[str, ...]:
        return self._selected_addons

    @property
    def is_work_trip(self) -> bool:
        return self._is_work_trip

    @property
    def company_name(self) -> str | None:
        return self._company_name

    @property
    def tax_id(self) -> str | None:
        return self._tax_id

    @property
    def special_requests(self) -> str | None:
        return self._special_requests

    @property
    def cancellation_target(self) -> BookingStatus:
        """キャンセルした場合の遷移先（支払い済みなら返金）"""
        if self._payment_status == PaymentStatus.PAID:
            return BookingStatus.REFUNDED
        return BookingStatus.CANCELLED

    def is_confirmed_with(self, payment_reference: str) -> bool:
        """指定の決済リファレンスで確定済みかどうか"""
        return (
            self._status == BookingStatus.PROCESSING
            and self._payment_status == PaymentStatus.PAID
            and self._payment_id == payment_reference
        )

    def confirm_payment(self, payment_reference: str, now: IsoDateTime) -> bool:
        """決済承認を反映する

        status / payment_status / 履歴を1つの単位として変更する。
        同じリファレンスで確定済みなら何もせず False を返す（冪等）。
        """
        if not payment_reference:
            raise ValidationException(
                "Payment reference is required", field="payment_reference"
            )
        if self.is_confirmed_with(payment_reference):
            return False
        if self._status != BookingStatus.PENDING_PAYMENT:
            raise InvalidStateException(
                f"Cannot confirm payment for a booking in {self._status.value} status",
                current=self._status.value,
                target=BookingStatus.PROCESSING.value,
            )

        self._payment_id = payment_reference
        self._transition(
            BookingStatus.PROCESSING,
            now,
            note=f"Payment confirmed ({payment_reference})",
            payment_status=PaymentStatus.PAID,
        )
        return True

    def cancel(self, reason: str | None, now: IsoDateTime) -> None:
        """予約をキャンセルする（支払い済みなら refunded へ）"""
        if not self._status.is_cancellable:
            raise InvalidStateException(
                f"Cannot cancel a booking in {self._status.value} status",
                current=self._status.value,
                target=self.cancellation_target.value,
            )
        note = (reason or "").strip()
        if not note:
            if self._status != BookingStatus.PENDING_PAYMENT:
                raise ValidationException(
                    "Cancellation reason is required", field="reason"
                )
            note = "Cancelled by user"

        self._transition(self.cancellation_target, now, note=note)

    def advance_to(
        self, target: BookingStatus, now: IsoDateTime, note: str | None = None
    ) -> None:
        """運用側の操作でステータスを進める（ビザ申請・渡航準備・完了・失敗）"""
        if target in _DEDICATED_TARGETS:
            raise InvalidStateException(
                f"Status {target.value} can only be reached through its own operation",
                current=self._status.value,
                target=target.value,
            )
        if target == BookingStatus.FAILED:
            if self._payment_status == PaymentStatus.PAID:
                raise InvalidStateException(
                    "A paid booking cannot be marked as failed",
                    current=self._status.value,
                    target=target.value,
                )
            if not note or not note.strip():
                raise ValidationException("A note is required", field="note")
        if target == BookingStatus.COMPLETED and self._status.can_transition_to(
            target
        ):
            if not self._travel_period.has_ended(now.utc_date()):
                raise InvalidStateException(
                    "Cannot complete a booking before the trip has ended",
                    current=self._status.value,
                    target=target.value,
                )

        # 失敗した予約の決済は failed として記録する
        payment_status = (
            PaymentStatus.FAILED if target == BookingStatus.FAILED else None
        )
        self._transition(target, now, note=note, payment_status=payment_status)

    def mark_payment_refunded(self, refund_reference: str, now: IsoDateTime) -> bool:
        """返金の完了を記録する（refunded の予約の決済を paid -> refunded）

        ステータスは変わらないため履歴は追記しない。
        同じリファレンスで記録済みなら何もせず False を返す（冪等）。
        """
        if not refund_reference or not refund_reference.strip():
            raise ValidationException(
                "Refund reference is required", field="refund_reference"
            )
        if (
            self._payment_status == PaymentStatus.REFUNDED
            and self._refund_id == refund_reference
        ):
            return False
        if (
            self._status != BookingStatus.REFUNDED
            or self._payment_status != PaymentStatus.PAID
        ):
            raise InvalidStateException(
                f"Cannot record a refund for a booking in {self._status.value} status "
                f"with {self._payment_status.value} payment",
                current=self._status.value,
                target=BookingStatus.REFUNDED.value,
            )

        self._payment_status = PaymentStatus.REFUNDED
        self._refund_id = refund_reference
        self._updated_at = now
        self._bump_revision()
        self._validate_invariants()
        return True

    def _transition(
        self,
        target: BookingStatus,
        now: IsoDateTime,
        note: str | None = None,
        payment_status: PaymentStatus | None = None,
    ) -> None:
        if not self._status.can_transition_to(target):
            raise InvalidStateException(
                f"Invalid booking status transition: "
                f"{self._status.value} -> {target.value}",
                current=self._status.value,
                target=target.value,
            )
        if payment_status is not None:
            self._payment_status = payment_status
        entry = StatusHistoryEntry(status=target, date=now, note=note)
        self._status = target
        self._status_history = (*self._status_history, entry)
        self._appended_history = (*self._appended_history, entry)
        self._updated_at = now
        self._bump_revision()
        self._validate_invariants()
