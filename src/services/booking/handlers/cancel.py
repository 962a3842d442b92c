import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from services.booking.applications.booking_service import BookingService
from services.booking.domain.factory import BookingFactory
from services.booking.domain.value_object import BookingId
from services.booking.handlers.request_models import CancelBookingRequest
from services.booking.handlers.response_models import to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.dynamodb_package_repository import (
    DynamoDBPackageRepository,
)
from services.shared.domain.exception import DomainException
from services.shared.utils import (
    api_response,
    error_response,
    validation_error_response,
)

logger = Logger()

repository = DynamoDBBookingRepository()
package_repository = DynamoDBPackageRepository()
service = BookingService(
    repository=repository,
    package_repository=package_repository,
    factory=BookingFactory(),
)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """予約キャンセル Lambda Handler（支払い済みなら refunded）"""
    path_params = event.path_parameters or {}
    booking_id = path_params.get("booking_id")

    if not booking_id:
        return api_response(400, {"message": "booking_id is required"})

    logger.info("Received cancel booking request", extra={"booking_id": booking_id})

    try:
        request = CancelBookingRequest.model_validate_json(event.body or "{}")
        booking = asyncio.run(
            service.cancel_booking(BookingId(value=booking_id), request.reason)
        )
    except ValidationError as e:
        return validation_error_response(e)
    except DomainException as e:
        logger.warning(
            "Booking was not cancelled",
            extra={"booking_id": booking_id, "error": str(e)},
        )
        return error_response(e)
    except Exception:
        logger.exception("Failed to cancel booking")
        return api_response(500, {"message": "Internal server error"})

    return api_response(200, to_response(booking))
