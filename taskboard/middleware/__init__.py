"""HTTP middleware: timeout, body size limit, request ID, security headers.

Applied in create_app; order matters (first added = outermost).
"""

from taskboard.middleware.request_id import RequestIDMiddleware
from taskboard.middleware.request_size_limit import RequestSizeLimitMiddleware
from taskboard.middleware.security_headers import SecurityHeadersMiddleware
from taskboard.middleware.timeout import TimeoutMiddleware

__all__ = [
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
