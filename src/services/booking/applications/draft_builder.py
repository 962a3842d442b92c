from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable, TypedDict

from services.booking.domain.entity import TravelPackage
from services.booking.domain.factory import BookingPayload
from services.booking.domain.value_object import BookingDraft, Traveler
from services.shared.domain import Money
from services.shared.domain.exception import ValidationException


class SearchContext(TypedDict, total=False):
    """検索画面から引き継ぐ条件"""

    adults: int
    children: int
    infants: int
    departure_date: date
    return_date: date


class BookingDraftBuilder:
    """予約フォームの下書きを組み立てる

    各ステップは新しい BookingDraft を返す。旅行者情報の完全性はステップ側と
    予約作成時の再検証に任せ、ここでは強制しない。
    """

    def init_draft(
        self, package: TravelPackage, search_context: SearchContext | None = None
    ) -> BookingDraft:
        """パッケージと検索条件から下書きを作る（条件がなければ大人1名）"""
        context = search_context or {}
        return BookingDraft(
            package_id=package.id,
            package_title=package.title,
            destination=package.destination,
            package_price=package.price,
            departure_date=context.get("departure_date"),
            return_date=context.get("return_date"),
            adults_count=max(context.get("adults", 1), 1),
            children_count=max(context.get("children", 0), 0),
            infants_count=max(context.get("infants", 0), 0),
            currency=str(package.price.currency),
        )

    def set_dates(
        self, draft: BookingDraft, departure_date: date, return_date: date
    ) -> BookingDraft:
        if return_date <= departure_date:
            raise ValidationException(
                "Return date must be after departure date", field="return_date"
            )
        return replace(draft, departure_date=departure_date, return_date=return_date)

    def set_party(
        self, draft: BookingDraft, adults: int, children: int = 0, infants: int = 0
    ) -> BookingDraft:
        """人数を変更する（人数を超える旅行者情報は破棄）"""
        if adults < 1:
            raise ValidationException(
                "At least one adult is required", field="adults_count"
            )
        if children < 0 or infants < 0:
            raise ValidationException(
                "Traveler counts cannot be negative", field="children_count"
            )
        total = adults + children + infants
        return replace(
            draft,
            adults_count=adults,
            children_count=children,
            infants_count=infants,
            travelers=draft.travelers[:total],
        )

    def set_travelers(
        self, draft: BookingDraft, travelers: Iterable[Traveler]
    ) -> BookingDraft:
        return replace(draft, travelers=tuple(travelers))

    def set_addons(self, draft: BookingDraft, addon_ids: Iterable[str]) -> BookingDraft:
        return replace(draft, selected_addons=tuple(dict.fromkeys(addon_ids)))

    def set_work_trip(
        self, draft: BookingDraft, company_name: str, tax_id: str | None = None
    ) -> BookingDraft:
        return replace(
            draft, is_work_trip=True, company_name=company_name, tax_id=tax_id
        )

    def clear_work_trip(self, draft: BookingDraft) -> BookingDraft:
        return replace(draft, is_work_trip=False, company_name=None, tax_id=None)

    def set_special_requests(self, draft: BookingDraft, text: str | None) -> BookingDraft:
        return replace(draft, special_requests=(text or "").strip() or None)

    def set_total_price(
        self,
        draft: BookingDraft,
        amount: Decimal,
        currency: str | None = None,
    ) -> BookingDraft:
        """確認画面で算出された合計金額を設定する（金額の計算はしない）"""
        try:
            total = Money.of(amount, currency or draft.currency)
        except (ValueError, ArithmeticError) as e:
            raise ValidationException(str(e), field="total_price") from e
        return replace(draft, total_price=total, currency=str(total.currency))

    def go_to_step(self, draft: BookingDraft, step: int) -> BookingDraft:
        return replace(draft, current_step=max(step, 0))

    def to_booking_payload(self, draft: BookingDraft, user_id: str) -> BookingPayload:
        """下書きを予約作成の入力に変換する"""
        if not user_id:
            raise ValidationException("user_id is required", field="user_id")
        if not draft.package_id:
            raise ValidationException("package_id is required", field="package_id")
        if draft.departure_date is None:
            raise ValidationException(
                "departure_date is required", field="departure_date"
            )
        if draft.return_date is None:
            raise ValidationException("return_date is required", field="return_date")
        if draft.total_price is None:
            raise ValidationException("total_price is required", field="total_price")
        if draft.is_work_trip and not (draft.company_name or "").strip():
            raise ValidationException(
                "Company name is required for a work trip", field="company_name"
            )

        return {
            "user_id": user_id,
            "package_id": draft.package_id,
            "package_title": draft.package_title or "",
            "destination": draft.destination or "",
            "departure_date": draft.departure_date.isoformat(),
            "return_date": draft.return_date.isoformat(),
            "adults_count": draft.adults_count,
            "children_count": draft.children_count,
            "infants_count": draft.infants_count,
            "travelers": list(draft.travelers),
            "total_price": draft.total_price.amount,
            "currency": str(draft.total_price.currency),
            "selected_addons": list(draft.selected_addons),
            "is_work_trip": draft.is_work_trip,
            "company_name": draft.company_name,
            "tax_id": draft.tax_id,
            "special_requests": draft.special_requests,
        }
