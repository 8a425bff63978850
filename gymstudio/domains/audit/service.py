# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Audit trail for admin actions.

Every enrollment transition, deletion and seat change is recorded with
the actor, action, target, timestamp and outcome. Records go to the
audit_logs table and to the application log.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from gymstudio.domains.errors import StoreError
from gymstudio.infrastructure.database.repositories import AuditRepository
from gymstudio.models.common import AuditOutcome

logger = logging.getLogger(__name__)


class AuditService:
    """Writes audit records.

    A failed audit write is logged and does not change the outcome of
    the action being audited, which may already be committed.

    Attributes:
        _repository: Audit log store.
    """

    def __init__(
        self,
        db: AsyncSession | None = None,
        repository: AuditRepository | None = None,
    ) -> None:
        if repository is None:
            if db is None:
                raise ValueError("AuditService needs a session or a repository")
            repository = AuditRepository(db)
        self._repository = repository

    async def record(
        self,
        action: str,
        resource: str,
        outcome: AuditOutcome,
        actor_id: str | None = None,
        target_id: str | None = None,
        details: dict[str, Any] | None = None,
        ip_address: str | None = None,
    ) -> None:
        """Record an audited action.

        Args:
            action: Action name, e.g. ``enrollment.approve``.
            resource: Resource kind, e.g. ``enrollment``.
            outcome: success, noop or failure.
            actor_id: User performing the action.
            target_id: Record acted on.
            details: Extra JSON-serializable context. Never sensitive values.
            ip_address: Client address when known.
        """
        logger.info(
            "audit action=%s resource=%s target=%s actor=%s outcome=%s",
            action,
            resource,
            target_id,
            actor_id,
            outcome.value,
        )
        try:
            await self._repository.create(
                action=action,
                resource=resource,
                outcome=outcome.value,
                actor_id=actor_id,
                target_id=target_id,
                details=details,
                ip_address=ip_address,
            )
        except StoreError as e:
            logger.error(
                "Audit record not persisted: action=%s target=%s: %s",
                action,
                target_id,
                e,
            )
