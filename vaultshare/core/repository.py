import logging
from typing import Any, Awaitable, Callable, TypeVar

from vaultshare.core.errors import (
    NOT_FOUND_CODE, BackendError, is_backend_reported, to_backend_error,
)
from vaultshare.core.result import Result
from vaultshare.core.retry import with_retry
from vaultshare.database.supabase_client import BackendConnector

logger = logging.getLogger(__name__)

T = TypeVar("T")

REPOSITORY_MAX_RETRIES = 2


def expect_rows(response, what: str):
    """Writes filtered by id come back empty when nothing matched."""
    if not response.data:
        raise BackendError(f"{what} not found", code=NOT_FOUND_CODE)
    return response


def require_id(value: str, name: str) -> str:
    if not value or not str(value).strip():
        raise ValueError(f"{name} is required")
    return value


class SupabaseRepository:
    """Shared plumbing: every call goes through with_retry and backend errors become Result.error."""

    table_name: str = ""

    def __init__(self, connector: BackendConnector):
        self.connector = connector

    def table(self):
        return self.connector.table(self.table_name)

    async def _run(
        self,
        label: str,
        query: Callable[[], Awaitable[Any]],
        parse: Callable[[Any], T],
    ) -> Result[T]:
        try:
            response = await with_retry(query, max_retries=REPOSITORY_MAX_RETRIES, label=label)
        except Exception as e:
            if not is_backend_reported(e):
                raise
            error = to_backend_error(e)
            logger.info(f"{label}: backend returned {error.code or 'error'}: {error.message}")
            return Result.failure(error)
        return Result.success(parse(response.data))
