import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from services.booking.domain.enum import BookingStatus
from services.booking.domain.value_object import BookingId
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.payment.domain.value_object import PaymentIntent
from services.payment.handlers.request_models import CreatePaymentIntentRequest
from services.payment.handlers.response_models import to_response
from services.payment.infrastructure.airwallex_payment_gateway import (
    AirwallexPaymentGateway,
)
from services.shared.domain import Money
from services.shared.domain.exception import (
    DomainException,
    InvalidStateException,
    ResourceNotFoundException,
    ValidationException,
)
from services.shared.utils import (
    api_response,
    error_response,
    validation_error_response,
)

logger = Logger()

repository = DynamoDBBookingRepository()


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """決済インテント作成 Lambda Handler

    認証情報をクライアントに渡さないよう、インテントの作成はサーバー側で行う。
    """
    logger.info("Received create payment intent request")

    try:
        request = CreatePaymentIntentRequest.model_validate_json(event.body or "{}")
        intent = asyncio.run(_create_intent(request))
    except ValidationError as e:
        return validation_error_response(e)
    except DomainException as e:
        logger.warning("Payment intent was not created", extra={"error": str(e)})
        return error_response(e)
    except Exception:
        logger.exception("Failed to create payment intent")
        return api_response(500, {"message": "Internal server error"})

    logger.info(
        "Payment intent created",
        extra={"booking_id": intent.order_ref, "intent_id": intent.intent_id},
    )
    return api_response(201, to_response(intent))


async def _create_intent(request: CreatePaymentIntentRequest) -> PaymentIntent:
    """支払い待ちの予約に対してだけインテントを作成する"""
    booking_id = BookingId(value=request.booking_id)
    booking = await repository.find_by_id(booking_id)
    if booking is None:
        raise ResourceNotFoundException(f"Booking not found: {booking_id}")
    if booking.status != BookingStatus.PENDING_PAYMENT:
        raise InvalidStateException(
            f"Cannot start payment for a booking in {booking.status.value} status",
            current=booking.status.value,
            target=BookingStatus.PROCESSING.value,
        )

    try:
        amount = Money.of(
            request.amount, request.currency or str(booking.total_price.currency)
        )
    except (ValueError, ArithmeticError) as e:
        raise ValidationException(str(e), field="currency") from e

    gateway = AirwallexPaymentGateway()
    try:
        return await gateway.create_intent(amount, order_ref=str(booking_id))
    finally:
        await gateway.aclose()
