import asyncio
from typing import Any, Callable

from botocore.exceptions import ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from services.shared.domain.exception import StoreUnavailableException

# リトライで回復しうる DynamoDB のエラーコード
TRANSIENT_ERROR_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
        "InternalServerError",
        "ServiceUnavailable",
        "TransactionConflictException",
    }
)


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


async def call_table(operation: Callable[..., Any], **kwargs: Any) -> Any:
    """boto3 の同期 API をスレッドで実行し、一時的な障害を StoreUnavailableException に変換する"""
    try:
        return await asyncio.to_thread(operation, **kwargs)
    except ClientError as e:
        if error_code(e) in TRANSIENT_ERROR_CODES:
            raise StoreUnavailableException(str(e)) from e
        raise
    except (BotoConnectionError, HTTPClientError) as e:
        raise StoreUnavailableException(str(e)) from e
