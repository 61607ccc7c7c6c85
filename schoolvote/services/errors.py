class ServiceError(Exception):
    """Base class for errors surfaced to API clients.

    Each subclass maps to an HTTP status and a stable machine-readable code so
    callers never have to match on message text.
    """

    status_code = 400
    code = "error"

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ValidationError(ServiceError):
    status_code = 400
    code = "validation_error"


class AuthenticationError(ServiceError):
    status_code = 401
    code = "invalid_credentials"


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"


class ResetFailedError(ServiceError):
    status_code = 500
    code = "reset_failed"
