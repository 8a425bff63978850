# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class catalog domain: matching, capacity and catalog administration."""

from gymstudio.domains.class_.capacity import CapacityGuard
from gymstudio.domains.class_.matcher import ClassMatcher
from gymstudio.domains.class_.service import ClassService

__all__ = [
    "CapacityGuard",
    "ClassMatcher",
    "ClassService",
]
