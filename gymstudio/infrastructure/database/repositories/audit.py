# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit log store."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from gymstudio.infrastructure.database.models import AuditLog
from gymstudio.infrastructure.database.repositories.base import BaseRepository


class AuditRepository(BaseRepository):
    """Append-only access to audit records."""

    async def create(
        self,
        action: str,
        resource: str,
        outcome: str,
        actor_id: str | None = None,
        target_id: str | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> AuditLog:
        """Persist an audit record.

        Raises:
            StoreError: If the insert fails.
        """
        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            resource=resource,
            target_id=target_id,
            outcome=outcome,
            details=details or {},
            ip_address=ip_address,
        )
        try:
            self.db.add(entry)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail("write audit log", e)
        return entry

    async def list_for_target(self, target_id: str) -> list[AuditLog]:
        """List audit records for a target, oldest first."""
        try:
            result = await self.db.execute(
                select(AuditLog)
                .where(AuditLog.target_id == target_id)
                .order_by(AuditLog.created_at, AuditLog.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            await self._fail("list audit logs", e)
