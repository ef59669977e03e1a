class ScreenServiceError(Exception):
    """Base class for every failure a service operation can surface."""

    status_code = 500
    code = "internal"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ScreenServiceError):
    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(ScreenServiceError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class NotFound(ScreenServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidOrExpired(ScreenServiceError):
    status_code = 400
    code = "invalid_or_expired"
    default_message = "Invalid or expired pairing code"


class ValidationError(ScreenServiceError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid request"


class NotAssociated(ValidationError):
    code = "not_associated"
    default_message = "Screen not associated with a masjid"


class Conflict(ScreenServiceError):
    status_code = 409
    code = "conflict"
    default_message = "Conflict"


class Internal(ScreenServiceError):
    pass
