from functools import lru_cache

from aws_lambda_powertools import Logger


@lru_cache(maxsize=None)
def get_logger(service_name: str) -> Logger:
    """サービス名ごとに1つの Logger を返す

    Lambda ハンドラー以外（アプリケーション層・インフラ層・クライアント層）から使う。
    ログレベルは POWERTOOLS_LOG_LEVEL で変更できる。
    """
    return Logger(service=service_name)
