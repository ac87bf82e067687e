"""SecureLink models package.

Defines the per-request data contracts shared by the checker and the web layer:

  - check.py — CheckResult, ErrorKind and the ThreatCheckError hierarchy

Nothing here survives beyond a single request/response cycle.
"""
