"""Function entry point for serverless hosts (e.g. Vercel's Python runtime).

The host imports this module and dispatches requests to the ASGI ``app``; it
owns the listen socket, so no host/port configuration applies here. Same
application and routes as the standalone server.
"""

from securelink.main import app

handler = app

__all__ = ["app", "handler"]
