# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Business domains of the studio backend.

Each subpackage holds the services for one area:
- enrollment: submissions, duplicate detection and the status workflow
- class_: class catalog, matching and capacity
- audit: audit trail of admin actions
- auth: admin authentication
"""
