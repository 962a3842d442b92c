from __future__ import annotations

from typing import Callable

from services.booking.applications.booking_service import BookingService
from services.booking.applications.draft_builder import (
    BookingDraftBuilder,
    SearchContext,
)
from services.booking.domain.entity import Booking, TravelPackage
from services.booking.domain.factory import BookingFactory
from services.booking.domain.repository import BookingRepository, PackageRepository
from services.booking.domain.value_object import BookingDraft
from services.client.cached_booking_service import CachedBookingService
from services.client.local_reconciled_cache import BookingView, LocalReconciledCache
from services.payment.applications.payment_orchestrator import PaymentOrchestrator
from services.payment.domain.gateway import PaymentGateway
from services.shared.domain import IsoDateTime, UserId
from services.shared.domain.exception import ValidationException
from services.shared.utils import get_logger

logger = get_logger("client")


class AppState:
    """アプリケーション状態のコンテナ

    ログイン中のユーザー・予約の下書き・予約キャッシュと、それらを操作する
    サービスをまとめて保持する。モジュールレベルのシングルトンは使わず、
    build() で依存を注入して組み立てる。
    """

    def __init__(
        self,
        booking_service: CachedBookingService,
        payment_orchestrator: PaymentOrchestrator,
        cache: LocalReconciledCache,
        draft_builder: BookingDraftBuilder,
        current_user_id: UserId | None = None,
    ) -> None:
        self.booking_service = booking_service
        self.payment_orchestrator = payment_orchestrator
        self.cache = cache
        self.draft_builder = draft_builder
        self.current_user_id = current_user_id
        self._draft: BookingDraft | None = None

    @classmethod
    def build(
        cls,
        repository: BookingRepository,
        package_repository: PackageRepository,
        gateway: PaymentGateway,
        current_user_id: UserId | None = None,
        clock: Callable[[], IsoDateTime] = IsoDateTime.now,
        confirm_retry_delay: float | None = None,
    ) -> AppState:
        service = BookingService(
            repository=repository,
            package_repository=package_repository,
            factory=BookingFactory(),
            clock=clock,
        )
        cache = LocalReconciledCache(service)
        cached_service = CachedBookingService(service, cache)
        orchestrator = PaymentOrchestrator(
            booking_service=cached_service,
            gateway=gateway,
            confirm_retry_delay=confirm_retry_delay,
        )
        return cls(
            booking_service=cached_service,
            payment_orchestrator=orchestrator,
            cache=cache,
            draft_builder=BookingDraftBuilder(),
            current_user_id=current_user_id,
        )

    @property
    def draft(self) -> BookingDraft | None:
        return self._draft

    def sign_in(self, user_id: UserId) -> None:
        if self.current_user_id != user_id:
            self.cache.clear()
            self._draft = None
        self.current_user_id = user_id

    def sign_out(self) -> None:
        self.current_user_id = None
        self.cache.clear()
        self._draft = None

    def start_draft(
        self, package: TravelPackage, search_context: SearchContext | None = None
    ) -> BookingDraft:
        """パッケージ詳細から予約フォームを開始する"""
        self._draft = self.draft_builder.init_draft(package, search_context)
        return self._draft

    def update_draft(
        self, fn: Callable[[BookingDraftBuilder, BookingDraft], BookingDraft]
    ) -> BookingDraft:
        """下書きにステップを適用する

        例: state.update_draft(lambda b, d: b.set_addons(d, ["insurance"]))
        """
        if self._draft is None:
            raise ValidationException("No booking draft in progress", field="draft")
        self._draft = fn(self.draft_builder, self._draft)
        return self._draft

    def reset_draft(self) -> None:
        self._draft = None

    async def submit_draft(self) -> Booking:
        """下書きから予約を作成する（成功したら下書きを破棄）

        失敗した場合は下書きを残し、利用者が修正して再送できるようにする。
        """
        if self._draft is None:
            raise ValidationException("No booking draft in progress", field="draft")
        if self.current_user_id is None:
            raise ValidationException("user_id is required", field="user_id")

        payload = self.draft_builder.to_booking_payload(
            self._draft, str(self.current_user_id)
        )
        booking = await self.booking_service.create_booking(payload)
        self._draft = None
        logger.info("Booking draft submitted", extra={"booking_id": str(booking.id)})
        return booking

    async def on_bookings_focus(self) -> list[BookingView]:
        """予約一覧画面の表示時にキャッシュを取り直す"""
        if self.current_user_id is None:
            return []
        await self.cache.refresh(self.current_user_id)
        return self.cache.bookings()
