# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared repository plumbing."""

import logging
from typing import NoReturn

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.errors import StoreError

logger = logging.getLogger(__name__)


class BaseRepository:
    """Base class for repositories bound to one async session.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _fail(self, operation: str, error: SQLAlchemyError) -> NoReturn:
        """Roll back and raise a StoreError for a failed operation.

        Args:
            operation: Short description used in the message.
            error: The underlying SQLAlchemy error.

        Raises:
            StoreError: Always.
        """
        logger.error("Store operation failed: %s: %s", operation, error)
        try:
            await self.db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error("Rollback after %s failed: %s", operation, rollback_error)
        raise StoreError(f"Store operation failed: {operation}") from error
