"""Standalone server entry point for SecureLink.

Reads host and port from the loaded config (0.0.0.0:8080 by default, PORT/HOST
env vars win) and starts uvicorn with bounded connection settings.

Usage:
    python -m securelink.run
    securelink                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from securelink.config import load_config

# Maximum number of concurrent connections accepted by uvicorn.
# Matches the httpx pool size (POOL_MAX_CONNECTIONS in constants.py).
UVICORN_LIMIT_CONCURRENCY: int = 100

# OS-level TCP connection backlog queue size.
UVICORN_BACKLOG: int = 50

# HTTP keep-alive timeout in seconds.
UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the SecureLink server.

    Loads config first so a missing GOOGLE_API_KEY stops the process before the
    socket is bound.

    Raises:
        SystemExit: Propagated from load_config() on configuration errors.
    """
    config = load_config()

    uvicorn.run(
        "securelink.main:app",
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
