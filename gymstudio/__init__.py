"""Gymnastics studio backend.

Enrollment intake, admin review and capacity-aware class assignment for a
gymnastics studio.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
