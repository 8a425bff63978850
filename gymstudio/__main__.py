# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Run the studio API with uvicorn: ``python -m gymstudio``."""

import uvicorn

from gymstudio.core.config import get_settings


def main() -> None:
    api = get_settings().api
    uvicorn.run(
        "gymstudio.api.app:create_app",
        factory=True,
        host=api.host,
        port=api.port,
        workers=None if api.reload else api.workers,
        reload=api.reload,
    )


if __name__ == "__main__":
    main()
