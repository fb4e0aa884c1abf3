"""
HEALTH MONITOR - Error Taxonomy
===============================
Domain exceptions raised by the core and translated to JSON `{message}`
responses at the HTTP boundary.
"""


class HealthMonitorError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(HealthMonitorError):
    """Malformed or missing input."""
    status_code = 400
    default_message = "Invalid request"


class DuplicateEmail(HealthMonitorError):
    status_code = 400
    default_message = "User with this email already exists"


class InvalidCredentials(HealthMonitorError):
    """Login failure. Intentionally does not say which check failed."""
    status_code = 401
    default_message = "Invalid email or password"


class Unauthenticated(HealthMonitorError):
    status_code = 401
    default_message = "Authentication required"


class InvalidToken(HealthMonitorError):
    status_code = 403
    default_message = "Invalid or expired token"


class Forbidden(HealthMonitorError):
    status_code = 403
    default_message = "Access denied"


class NotFound(HealthMonitorError):
    status_code = 404
    default_message = "Not found"


class ServiceUnavailable(HealthMonitorError):
    """Missing external credential or downstream failure."""
    status_code = 500
    default_message = "Service unavailable"


class InternalError(HealthMonitorError):
    status_code = 500


class ConfigurationError(Exception):
    """Raised at startup when the deployment configuration is unsafe."""
