import json

import httpx
import pytest

from services.payment.domain.enum import AuthorizationStatus
from services.payment.domain.value_object import PaymentIntent
from services.payment.infrastructure.airwallex_payment_gateway import (
    AirwallexPaymentGateway,
)
from services.shared.domain import Money
from services.shared.domain.exception import PaymentGatewayException

LOGIN_PATH = "/api/v1/authentication/login"
CREATE_PATH = "/api/v1/pa/payment_intents/create"


class FakeAirwallex:
    """MockTransport に渡すリクエストハンドラ（受信したリクエストを記録する）"""

    def __init__(self, statuses: list[dict] | None = None) -> None:
        self.statuses = statuses or [{"status": "SUCCEEDED"}]
        self.requests: list[httpx.Request] = []
        self.tokens = iter(["token-1", "token-2", "token-3"])
        self.reject_next_with_401 = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == LOGIN_PATH:
            return httpx.Response(200, json={"token": next(self.tokens)})
        if self.reject_next_with_401:
            self.reject_next_with_401 = False
            return httpx.Response(401, json={"code": "unauthorized"})
        if path == CREATE_PATH:
            body = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": "int_abc",
                    "client_secret": "cs_abc",
                    "amount": body["amount"],
                    "currency": body["currency"],
                },
            )
        if path.startswith("/api/v1/pa/payment_intents/"):
            data = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            return httpx.Response(200, json={"id": "int_abc", **data})
        return httpx.Response(404)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def create_gateway():
    """MockTransport を使う AirwallexPaymentGateway を生成する Factory fixture"""

    def _factory(handler, **overrides) -> AirwallexPaymentGateway:
        options = {
            "client_id": "client-1",
            "api_key": "key-1",
            "environment": "demo",
            "poll_interval": 0,
            "max_polls": 3,
        }
        options.update(overrides)
        return AirwallexPaymentGateway(
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
            **options,
        )

    return _factory


@pytest.fixture
def intent():
    return PaymentIntent(
        intent_id="int_abc",
        client_secret="cs_abc",
        amount=Money.of("500", "USD"),
        order_ref="bk_test",
    )


class TestCreateIntent:
    @pytest.mark.asyncio
    async def test_logs_in_and_creates_intent(self, create_gateway):
        api = FakeAirwallex()
        gateway = create_gateway(api)

        intent = await gateway.create_intent(Money.of("500", "USD"), "bk_test")

        assert intent.intent_id == "int_abc"
        assert intent.client_secret == "cs_abc"
        assert intent.order_ref == "bk_test"
        assert api.paths() == [LOGIN_PATH, CREATE_PATH]

        login, create = api.requests
        assert login.headers["x-client-id"] == "client-1"
        assert login.headers["x-api-key"] == "key-1"
        assert create.headers["Authorization"] == "Bearer token-1"
        body = json.loads(create.content)
        assert body["merchant_order_id"] == "bk_test"
        assert body["amount"] == 500.0
        assert body["currency"] == "USD"
        assert body["request_id"].startswith("req_")

    @pytest.mark.asyncio
    async def test_token_is_reused(self, create_gateway):
        api = FakeAirwallex()
        gateway = create_gateway(api)

        await gateway.create_intent(Money.of("500", "USD"), "bk_1")
        await gateway.create_intent(Money.of("500", "USD"), "bk_2")

        assert api.paths().count(LOGIN_PATH) == 1

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed_once(self, create_gateway):
        api = FakeAirwallex()
        gateway = create_gateway(api)
        await gateway.create_intent(Money.of("500", "USD"), "bk_1")
        api.reject_next_with_401 = True

        await gateway.create_intent(Money.of("500", "USD"), "bk_2")

        assert api.paths().count(LOGIN_PATH) == 2
        assert api.requests[-1].headers["Authorization"] == "Bearer token-2"

    @pytest.mark.asyncio
    async def test_missing_credentials(self, create_gateway, monkeypatch):
        monkeypatch.delenv("AIRWALLEX_CLIENT_ID", raising=False)
        monkeypatch.delenv("AIRWALLEX_API_KEY", raising=False)
        api = FakeAirwallex()
        gateway = create_gateway(api, client_id=None, api_key=None)

        with pytest.raises(PaymentGatewayException, match="Missing Airwallex credentials"):
            await gateway.create_intent(Money.of("500", "USD"), "bk_test")

        assert api.requests == []

    @pytest.mark.asyncio
    async def test_rejected_login(self, create_gateway):
        gateway = create_gateway(lambda request: httpx.Response(403))

        with pytest.raises(PaymentGatewayException, match="authentication failed"):
            await gateway.create_intent(Money.of("500", "USD"), "bk_test")

    @pytest.mark.asyncio
    async def test_server_error_is_wrapped(self, create_gateway):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == LOGIN_PATH:
                return httpx.Response(200, json={"token": "token-1"})
            return httpx.Response(500)

        gateway = create_gateway(handler)

        with pytest.raises(PaymentGatewayException, match="500"):
            await gateway.create_intent(Money.of("500", "USD"), "bk_test")

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self, create_gateway):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gateway = create_gateway(handler)

        with pytest.raises(PaymentGatewayException):
            await gateway.create_intent(Money.of("500", "USD"), "bk_test")


class TestPresentAuthorization:
    @pytest.mark.asyncio
    async def test_polls_until_succeeded(self, create_gateway, intent):
        api = FakeAirwallex(
            statuses=[
                {"status": "REQUIRES_PAYMENT_METHOD"},
                {"status": "REQUIRES_CUSTOMER_ACTION"},
                {"status": "SUCCEEDED"},
            ]
        )
        gateway = create_gateway(api)

        result = await gateway.present_authorization(intent)

        assert result.status == AuthorizationStatus.AUTHORIZED
        assert result.reference == "int_abc"
        assert api.paths().count("/api/v1/pa/payment_intents/int_abc") == 3

    @pytest.mark.asyncio
    async def test_cancelled_intent(self, create_gateway, intent):
        gateway = create_gateway(FakeAirwallex(statuses=[{"status": "CANCELLED"}]))

        result = await gateway.present_authorization(intent)

        assert result.status == AuthorizationStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_failed_attempt_reports_failure_code(self, create_gateway, intent):
        api = FakeAirwallex(
            statuses=[
                {
                    "status": "REQUIRES_PAYMENT_METHOD",
                    "latest_payment_attempt": {
                        "status": "FAILED",
                        "failure_code": "issuer_declined",
                    },
                }
            ]
        )
        gateway = create_gateway(api)

        result = await gateway.present_authorization(intent)

        assert result.status == AuthorizationStatus.FAILED
        assert result.reason == "issuer_declined"

    @pytest.mark.asyncio
    async def test_gives_up_polling_as_cancelled(
        self, create_gateway, intent
    ):
        api = FakeAirwallex(statuses=[{"status": "REQUIRES_PAYMENT_METHOD"}])
        gateway = create_gateway(api, max_polls=2)

        result = await gateway.present_authorization(intent)

        assert result.status == AuthorizationStatus.CANCELLED
        assert api.paths().count("/api/v1/pa/payment_intents/int_abc") == 2
