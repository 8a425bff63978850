# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class matching for approved applications.

Candidates are active classes of exactly the requested program. When a
date of birth is known, classes whose inclusive age bounds exclude the
child's calendar age are dropped. Full classes are dropped. The rest are
ranked by remaining seats, most first, with ties kept in catalog order.
"""

import logging
from datetime import date

from gymstudio.domains.class_.capacity import CapacityGuard
from gymstudio.infrastructure.database.models import ClassDefinition
from gymstudio.infrastructure.database.repositories import ClassCatalogRepository
from gymstudio.utils.datetime import calculate_age

logger = logging.getLogger(__name__)


class ClassMatcher:
    """Selects the best class for a student.

    Pure read and compute over a catalog snapshot. Seats are taken by the
    caller through the capacity guard.
    """

    def __init__(self, catalog: ClassCatalogRepository, guard: CapacityGuard) -> None:
        self._catalog = catalog
        self._guard = guard

    async def rank_classes(
        self,
        program_type: str,
        date_of_birth: date | None,
        today: date | None = None,
    ) -> list[ClassDefinition]:
        """Rank every eligible class for a student.

        Args:
            program_type: Program the student applied for.
            date_of_birth: Student date of birth, or None to skip age checks.
            today: Reference date for the age. Defaults to today (UTC).

        Returns:
            Eligible classes, most remaining seats first.

        Raises:
            StoreError: If the catalog cannot be read.
        """
        candidates = await self._catalog.list_classes(program_type=program_type, active_only=True)
        if not candidates:
            logger.debug("No active classes for program %s", program_type)
            return []

        if date_of_birth is not None:
            age = calculate_age(date_of_birth, today)
            candidates = [class_ for class_ in candidates if class_.accepts_age(age)]

        ranked: list[tuple[ClassDefinition, int]] = []
        for class_ in candidates:
            remaining = class_.capacity - await self._guard.count_active(class_.id)
            if remaining > 0:
                ranked.append((class_, remaining))

        # list.sort is stable, so equal remaining seats keep catalog order
        ranked.sort(key=lambda item: item[1], reverse=True)
        return [class_ for class_, _ in ranked]

    async def find_best_class(
        self,
        program_type: str,
        date_of_birth: date | None,
        today: date | None = None,
    ) -> ClassDefinition | None:
        """Get the top-ranked eligible class, or None when nothing fits."""
        ranked = await self.rank_classes(program_type, date_of_birth, today)
        return ranked[0] if ranked else None
