# clicr/errors.py
"""
Engine error taxonomy.
Every error carries an HTTP status, a stable code and an optional reason so
callers can render the right enforcement message (hard stop, override
required, banned, out of scope ...). main.py turns these into JSON responses.
"""

from typing import Optional


class EngineError(Exception):
    status_code = 500
    code = "ENGINE_ERROR"

    def __init__(self, message: str, reason: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_dict(self) -> dict:
        return {"error": self.code, "reason": self.reason, "detail": self.message}


class Forbidden(EngineError):
    """Banned principal, unauthorized scope, or entry refused by capacity policy."""
    status_code = 403
    code = "FORBIDDEN"


class NotFound(EngineError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictOrAtomicFailure(EngineError):
    """The atomic store procedure rejected the mutation. Nothing was applied."""
    status_code = 409
    code = "ATOMIC_FAILURE"


class ValidationError(EngineError):
    status_code = 422
    code = "VALIDATION_ERROR"


class UpstreamUnavailable(EngineError):
    status_code = 503
    code = "UPSTREAM_UNAVAILABLE"
