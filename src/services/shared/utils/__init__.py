from .http_response import api_response as api_response
from .http_response import error_response as error_response
from .http_response import (
    validation_error_response as validation_error_response,
)
from .logger import get_logger as get_logger
from .validators import to_decimal as to_decimal
from .validators import to_iso_date as to_iso_date
from .validators import blank_to_none as blank_to_none
