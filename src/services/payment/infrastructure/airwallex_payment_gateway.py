import asyncio
import os
import uuid

import httpx

from services.payment.domain.gateway import PaymentGateway
from services.payment.domain.value_object import AuthorizationResult, PaymentIntent
from services.shared.domain import Money
from services.shared.domain.exception import PaymentGatewayException
from services.shared.utils import get_logger

logger = get_logger("payment")

_HOSTS = {
    "demo": "https://api-demo.airwallex.com",
    "production": "https://api.airwallex.com",
}

_AUTHORIZED_STATUSES = frozenset({"SUCCEEDED", "REQUIRES_CAPTURE"})


class AirwallexPaymentGateway(PaymentGateway):
    """Airwallex Payment Acceptance API を使った PaymentGateway の実装

    承認フロー自体は利用者の端末側で行われるため、present_authorization は
    インテントが終端ステータスになるまでポーリングして結果を判定する。
    """

    def __init__(
        self,
        client_id: str | None = None,
        api_key: str | None = None,
        environment: str | None = None,
        client: httpx.AsyncClient | None = None,
        poll_interval: float = 2.0,
        max_polls: int = 90,
    ) -> None:
        self.client_id = client_id or os.getenv("AIRWALLEX_CLIENT_ID")
        self.api_key = api_key or os.getenv("AIRWALLEX_API_KEY")
        self.environment = environment or os.getenv("AIRWALLEX_ENVIRONMENT", "demo")
        self.base_url = _HOSTS.get(self.environment, _HOSTS["demo"])
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self._client = client or httpx.AsyncClient(timeout=10.0)
        self._token: str | None = None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_intent(self, amount: Money, order_ref: str) -> PaymentIntent:
        """決済インテントを作成する（merchant_order_id に予約IDを設定）"""
        payload = {
            "request_id": f"req_{uuid.uuid4().hex}",
            "amount": float(amount.amount),
            "currency": str(amount.currency),
            "merchant_order_id": order_ref,
            "metadata": {"booking_id": order_ref},
        }
        data = await self._request(
            "POST", "/api/v1/pa/payment_intents/create", json=payload
        )
        if not data.get("id") or not data.get("client_secret"):
            raise PaymentGatewayException("Failed to create payment intent")

        return PaymentIntent(
            intent_id=data["id"],
            client_secret=data["client_secret"],
            amount=amount,
            order_ref=order_ref,
        )

    async def present_authorization(self, intent: PaymentIntent) -> AuthorizationResult:
        for _ in range(self.max_polls):
            data = await self._request(
                "GET", f"/api/v1/pa/payment_intents/{intent.intent_id}"
            )
            result = self._to_result(data)
            if result is not None:
                return result
            await asyncio.sleep(self.poll_interval)

        logger.info(
            "Payment authorization timed out",
            extra={"intent_id": intent.intent_id, "order_ref": intent.order_ref},
        )
        return AuthorizationResult.cancelled()

    @staticmethod
    def _to_result(data: dict) -> AuthorizationResult | None:
        """インテントの状態を承認結果に変換する（未確定なら None）"""
        status = data.get("status")
        if status in _AUTHORIZED_STATUSES:
            return AuthorizationResult.authorized(data["id"])
        if status == "CANCELLED":
            return AuthorizationResult.cancelled()

        attempt = data.get("latest_payment_attempt") or {}
        if attempt.get("status") == "FAILED":
            reason = attempt.get("failure_code") or "Payment failed"
            return AuthorizationResult.failed(reason)
        return None

    async def _login(self) -> str:
        if not self.client_id or not self.api_key:
            raise PaymentGatewayException("Missing Airwallex credentials")

        try:
            data = await self._send(
                "POST",
                "/api/v1/authentication/login",
                headers={"x-client-id": self.client_id, "x-api-key": self.api_key},
            )
        except httpx.HTTPStatusError as e:
            raise PaymentGatewayException("Airwallex authentication failed") from e
        token = data.get("token")
        if not token:
            raise PaymentGatewayException("Airwallex authentication failed")
        return token

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict:
        """認証付きでリクエストする（401 ならトークンを取り直して1回だけ再送）"""
        for attempt in range(2):
            if self._token is None:
                self._token = await self._login()
            try:
                return await self._send(
                    method,
                    path,
                    headers={"Authorization": f"Bearer {self._token}"},
                    json=json,
                )
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 401 and attempt == 0:
                    self._token = None
                    continue
                raise PaymentGatewayException(
                    f"Airwallex request failed: {method} {path} "
                    f"({e.response.status_code})"
                ) from e
        raise PaymentGatewayException(f"Airwallex request failed: {method} {path}")

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict,
        json: dict | None = None,
    ) -> dict:
        try:
            response = await self._client.request(
                method, f"{self.base_url}{path}", headers=headers, json=json
            )
        except httpx.RequestError as e:
            raise PaymentGatewayException(
                f"Airwallex request failed: {method} {path}"
            ) from e

        response.raise_for_status()
        return response.json()
