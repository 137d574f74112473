"""Application-level exception types.

Convention:
- ``InternalServerError``: errors whose details must never reach clients
  (unreadable defaults file, schema setup failures). The global handler logs
  the full message at ERROR and returns a generic 500.
- ``ValueError``: client-safe validation errors (unknown page, malformed key,
  nothing to roll back). The global handler returns ``str(exc)`` as the 422
  detail.

Malformed stored list values and missing keys are not errors at all: reads
fall back to the default content.
"""

from __future__ import annotations


class InternalServerError(Exception):
    """Raised for internal errors whose details must not be exposed to clients."""
