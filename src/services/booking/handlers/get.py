import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.booking_service import BookingService
from services.booking.domain.factory import BookingFactory
from services.booking.domain.value_object import BookingId
from services.booking.handlers.response_models import to_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.dynamodb_package_repository import (
    DynamoDBPackageRepository,
)
from services.shared.domain.exception import DomainException
from services.shared.utils import api_response, error_response

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
    """予約詳細取得 Lambda Handler"""

    path_params = event.path_parameters or {}
    booking_id = path_params.get("booking_id")

    if not booking_id:
        return api_response(400, {"message": "booking_id is required"})

    logger.info("Fetching booking details", extra={"booking_id": booking_id})

    try:
        booking = asyncio.run(service.get_booking_by_id(BookingId(value=booking_id)))
    except DomainException as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to fetch booking details")
        return api_response(500, {"message": "Internal server error"})

    return api_response(200, to_response(booking))
