"""Safe Browsing lookup client.

  - client.py — ThreatChecker (one POST per check), request body builder,
                response parser, shared httpx.AsyncClient factory
"""

from securelink.checker.client import ThreatChecker, create_http_client

__all__ = ["ThreatChecker", "create_http_client"]
