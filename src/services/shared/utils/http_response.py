import json

from pydantic import ValidationError

from services.shared.domain.exception import (
    AlreadyInProgressException,
    DomainException,
    DuplicateResourceException,
    InvalidStateException,
    PackageUnavailableException,
    PaymentAuthorizedButNotConfirmedException,
    PaymentGatewayException,
    ResourceNotFoundException,
    StoreUnavailableException,
    ValidationException,
)

# 上から順に isinstance で判定する（サブクラスを先に並べる）
_STATUS_CODES: tuple[tuple[type[DomainException], int], ...] = (
    (ValidationException, 400),
    (ResourceNotFoundException, 404),
    (InvalidStateException, 409),
    (PackageUnavailableException, 409),
    (AlreadyInProgressException, 409),
    (DuplicateResourceException, 409),
    (PaymentAuthorizedButNotConfirmedException, 502),
    (PaymentGatewayException, 502),
    (StoreUnavailableException, 503),
)


def api_response(status_code: int, body: dict) -> dict:
    """API Gateway HTTP API のレスポンス形式を生成する"""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def error_response(error: DomainException) -> dict:
    """ドメイン例外を種別ごとのステータスコードに変換する"""
    status_code = 500
    for exception_type, code in _STATUS_CODES:
        if isinstance(error, exception_type):
            status_code = code
            break

    body: dict = {"error": type(error).__name__, "message": str(error)}
    if isinstance(error, ValidationException) and error.field:
        body["field"] = error.field
    if isinstance(error, InvalidStateException) and error.current:
        body["current_status"] = error.current
    if isinstance(error, PaymentAuthorizedButNotConfirmedException):
        # 再試行させると二重課金になりうるため、サポート窓口へ誘導する
        body["payment_reference"] = error.payment_reference
        body["message"] = (
            "Your payment was received but the booking could not be updated. "
            "Please contact support with this payment reference."
        )
    return api_response(status_code, body)


def validation_error_response(error: ValidationError) -> dict:
    """リクエストモデル（pydantic）の検証エラーを 400 に変換する"""
    details = error.errors(include_url=False, include_context=False)
    first = details[0] if details else {}
    body = {
        "error": "ValidationException",
        "message": first.get("msg", "Invalid request"),
        "field": ".".join(str(loc) for loc in first.get("loc", ())) or None,
        "details": details,
    }
    return api_response(400, body)
