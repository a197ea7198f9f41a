class ServiceError(Exception):
    status = 400

    def __init__(self, code="SERVICE_ERROR", message="Service error", details=None, status=None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status is not None:
            self.status = status
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed or out-of-range input."""
    status = 422

    def __init__(self, message="Invalid input", code="VALIDATION_ERROR", details=None):
        super().__init__(code=code, message=message, details=details)


class InvalidStateError(ServiceError):
    """The record's current status does not permit the transition."""
    status = 409

    def __init__(self, message="Invalid state transition", code="INVALID_STATE", details=None):
        super().__init__(code=code, message=message, details=details)


class AuthError(ServiceError):
    status = 401

    def __init__(self, message="Authentication failed", code="AUTH_FAILED", details=None, status=None):
        super().__init__(code=code, message=message, details=details, status=status)


class NotFoundError(ServiceError):
    status = 404

    def __init__(self, message="Resource not found", code="NOT_FOUND", details=None):
        super().__init__(code=code, message=message, details=details)


class ForbiddenError(ServiceError):
    status = 403

    def __init__(self, message="Developer access required", code="FORBIDDEN", details=None):
        super().__init__(code=code, message=message, details=details)


class StoreUnavailableError(ServiceError):
    """The backing store is not configured or not reachable."""
    status = 503

    def __init__(self, message="Data store unavailable", code="STORE_UNAVAILABLE", details=None):
        super().__init__(code=code, message=message, details=details)
