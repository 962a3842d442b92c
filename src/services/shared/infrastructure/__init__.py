from .dynamodb import call_table as call_table
from .dynamodb import error_code as error_code
