"""
Error taxonomy for the NEO pipeline.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer should answer with, so routes can translate them without inspecting
the concrete type.
"""
from typing import Optional


class NeoWatchError(Exception):
    """Base class for all pipeline errors"""

    code = "NEO_WATCH_ERROR"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(NeoWatchError):
    """Bad caller input, raised before any upstream I/O"""

    code = "VALIDATION_ERROR"
    status_code = 400


class UpstreamError(NeoWatchError):
    """Base class for failures talking to NASA"""

    code = "API_ERROR"
    status_code = 502


class UpstreamRejected(UpstreamError):
    """NASA answered with a non-2xx status"""

    def __init__(self, upstream_status: int, message: str, code: str = "API_ERROR"):
        super().__init__(message, code=code)
        self.upstream_status = upstream_status


class UpstreamUnreachable(UpstreamError):
    """No response received (connection error or timeout)"""

    code = "SERVICE_UNAVAILABLE"
    status_code = 503


class ClientFault(UpstreamError):
    """Local failure building the request or decoding the response"""

    code = "UNKNOWN_ERROR"
    status_code = 500


class MalformedRecord(NeoWatchError):
    """A single upstream record could not be normalized"""

    code = "MALFORMED_RECORD"
    status_code = 502

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id
