import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from services.booking.applications.booking_service import BookingService
from services.booking.domain.factory import BookingFactory, BookingPayload
from services.booking.domain.value_object import Traveler
from services.booking.handlers.request_models import CreateBookingRequest
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
factory = BookingFactory()
service = BookingService(
    repository=repository, package_repository=package_repository, factory=factory
)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """予約作成 Lambda Handler"""
    logger.info("Received create booking request")

    try:
        request = CreateBookingRequest.model_validate_json(event.body or "{}")
        booking = asyncio.run(service.create_booking(_to_payload(request)))
    except ValidationError as e:
        return validation_error_response(e)
    except DomainException as e:
        logger.warning("Booking was not created", extra={"error": str(e)})
        return error_response(e)
    except Exception:
        logger.exception("Failed to create booking")
        return api_response(500, {"message": "Internal server error"})

    return api_response(201, to_response(booking))


def _to_payload(request: CreateBookingRequest) -> BookingPayload:
    """リクエストボディから BookingPayload を構築する"""
    return {
        "user_id": request.user_id,
        "package_id": request.package_id,
        "package_title": request.package_title,
        "destination": request.destination,
        "departure_date": request.departure_date.isoformat(),
        "return_date": request.return_date.isoformat(),
        "adults_count": request.adults_count,
        "children_count": request.children_count,
        "infants_count": request.infants_count,
        "travelers": [
            Traveler(
                id=t.id,
                name=t.name,
                age=t.age,
                type=t.type,
                passport_number=t.passport_number,
            )
            for t in request.travelers
        ],
        "total_price": request.total_price,
        "currency": request.currency,
        "selected_addons": request.selected_addons,
        "is_work_trip": request.is_work_trip,
        "company_name": request.company_name,
        "tax_id": request.tax_id,
        "special_requests": request.special_requests,
    }
