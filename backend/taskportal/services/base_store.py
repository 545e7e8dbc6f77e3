"""
Shared plumbing for the database-backed stores.

Every statement and commit goes through ``_execute``/``_commit`` so that a
driver or connection failure surfaces as StoreUnavailableError after the
session has been rolled back.
"""

from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskportal.core.exceptions import StoreUnavailableError
from taskportal.core.logging_config import logger


class BaseStore:
    """Holds the request-scoped session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, statement: Any, operation: str):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.log_error_with_context(e, context=operation)
            raise StoreUnavailableError(operation) from e

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.log_error_with_context(e, context=operation)
            raise StoreUnavailableError(operation) from e
