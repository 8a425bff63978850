# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API layer for the studio backend.

This module provides the FastAPI application and all HTTP endpoints.
Run with ``uvicorn --factory gymstudio.api:create_app``.
"""

from gymstudio.api.app import create_app

__all__ = ["create_app"]
