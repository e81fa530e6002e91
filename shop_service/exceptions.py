"""
Domain exceptions for the shop service.

Services raise these; the application exception handler maps each one to an
HTTP status and renders it in the response envelope.
"""


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed"""


class ServiceError(Exception):
    """Base exception for all service-layer errors"""
    status_code = 500

    def __init__(self, message: str, code: str = "SERVICE_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Bad input shape or value"""
    status_code = 400

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message=message, code="VALIDATION_ERROR")


class NotFoundError(ServiceError):
    """Entity absent or soft-deleted"""
    status_code = 404

    def __init__(self, message: str):
        super().__init__(message=message, code="NOT_FOUND")


class ConflictError(ServiceError):
    """Duplicate unique key or a state that forbids the operation"""
    status_code = 409

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT")


class UnauthorizedError(ServiceError):
    """Missing, invalid or expired credentials"""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message=message, code="UNAUTHORIZED")


class ForbiddenError(ServiceError):
    """Authenticated, but the role or ownership does not allow the operation"""
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message=message, code="FORBIDDEN")
