# ecommerce_admin/exceptions.py
# Exceptions raised from route and service code; the app-level handler
# renders each one as a response envelope.
from .constants import StatusCode
from .responses import ApiResponse


class ApiError(Exception):
    """Base exception carrying everything needed to build the envelope."""
    http_status = 400
    default_status_code = StatusCode.BAD_REQUEST
    default_message = 'Bad Request'

    def __init__(self, message=None, errors=None, status_code=None):
        self.message = message or self.default_message
        self.errors = errors
        self.status_code = status_code or self.default_status_code
        super().__init__(self.message)

    def to_api_response(self):
        return ApiResponse.error(self.message, self.errors, self.http_status,
                                 status_code=self.status_code)


class ValidationError(ApiError):
    """Field-level validation failure; ``errors`` maps field -> [messages]."""
    http_status = 422
    default_status_code = StatusCode.VALIDATION_ERROR
    default_message = 'Validation Error'


class NotFoundError(ApiError):
    http_status = 404
    default_status_code = StatusCode.NOT_FOUND
    default_message = 'Resource not found'


class UnauthorizedError(ApiError):
    http_status = 401
    default_status_code = StatusCode.UNAUTHORIZED
    default_message = 'Unauthenticated.'


class ForbiddenError(ApiError):
    http_status = 403
    default_status_code = StatusCode.FORBIDDEN
    default_message = 'You do not have the required authorization.'


class ConflictError(ApiError):
    """Business-rule guard, e.g. delete blocked by dependents or a duplicate write."""
    http_status = 400
    default_status_code = StatusCode.CONFLICT
    default_message = 'The request conflicts with the current state of the resource.'


class ServerError(ApiError):
    http_status = 500
    default_status_code = StatusCode.SERVER_ERROR
    default_message = 'An internal server error occurred. Please try again later.'
