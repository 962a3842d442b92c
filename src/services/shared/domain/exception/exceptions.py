class DomainException(Exception):
    """ドメイン層で発生する基底例外"""

    pass


class ValidationException(DomainException):
    """入力値が不完全・不正な場合（利用者が入力を修正すれば回復できる）"""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ResourceNotFoundException(DomainException):
    """リソースが見つからない場合"""

    pass


class BusinessRuleViolationException(DomainException):
    """ビジネスルールに違反した場合"""

    pass


class InvalidStateException(BusinessRuleViolationException):
    """状態遷移表にない遷移を要求された場合

    呼び出し側は最新の状態を取得し直してから次の操作を決める。
    """

    def __init__(
        self,
        message: str,
        current: str | None = None,
        target: str | None = None,
    ) -> None:
        super().__init__(message)
        self.current = current
        self.target = target


class OptimisticLockException(InvalidStateException):
    """楽観ロックの競合エラー（ステータス・リビジョンが期待値と異なる場合）"""

    pass


class DuplicateResourceException(DomainException):
    """リソースの重複エラー（条件付き書き込みの失敗時）"""

    pass


class PackageUnavailableException(DomainException):
    """参照しているパッケージが存在しない、または販売停止中の場合"""

    pass


class AlreadyInProgressException(DomainException):
    """同じ予約に対する決済がすでに進行中の場合（自動リトライしない）"""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Payment already in progress for booking: {booking_id}")
        self.booking_id = booking_id


class PaymentAuthorizedButNotConfirmedException(DomainException):
    """決済は承認されたが予約への反映に失敗した場合

    お金は動いているが予約は更新されていない。「決済失敗」として扱ってはならず、
    決済リファレンスを添えてサポートへの問い合わせを案内する。
    """

    def __init__(self, booking_id: str, payment_reference: str) -> None:
        super().__init__(
            f"Payment {payment_reference} was authorized "
            f"but booking {booking_id} could not be confirmed"
        )
        self.booking_id = booking_id
        self.payment_reference = payment_reference


class PaymentGatewayException(DomainException):
    """決済ゲートウェイとの通信・応答エラー"""

    pass


class StoreUnavailableException(DomainException):
    """永続化ストアへの一時的な通信エラー（リトライで回復しうる）"""

    pass
