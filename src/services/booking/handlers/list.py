import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from services.booking.applications.booking_service import BookingService
from services.booking.domain.factory import BookingFactory
from services.booking.handlers.response_models import to_list_response
from services.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from services.booking.infrastructure.dynamodb_package_repository import (
    DynamoDBPackageRepository,
)
from services.shared.domain import UserId
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
    """ユーザーの予約一覧取得 Lambda Handler（新しい順）"""

    path_params = event.path_parameters or {}
    user_id = path_params.get("user_id")

    if not user_id:
        return api_response(400, {"message": "user_id is required"})

    logger.info("Listing bookings", extra={"user_id": user_id})

    try:
        bookings = asyncio.run(service.get_user_bookings(UserId(value=user_id)))
    except DomainException as e:
        return error_response(e)
    except Exception:
        logger.exception("Failed to list bookings")
        return api_response(500, {"message": "Internal server error"})

    return api_response(200, to_list_response(bookings))
