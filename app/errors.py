"""
Error taxonomy shared by services and routes.

Services raise these; the handlers registered in ``create_app`` turn them
into the ``{"success": false, "message": ...}`` envelope.
"""


class ApiError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message=None, detail=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.detail = detail

    def to_dict(self):
        body = {'success': False, 'message': self.message}
        if self.detail is not None:
            body['error'] = self.detail
        return body


class InvalidInput(ApiError):
    status_code = 400
    default_message = "Invalid input"


class NotFound(ApiError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ApiError):
    # Business-rule conflicts are reported as plain bad requests.
    status_code = 400
    default_message = "Request conflicts with current state"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access denied"


class UpstreamError(ApiError):
    status_code = 500
    default_message = "Payment gateway request failed"


class InternalError(ApiError):
    status_code = 500
    default_message = "Internal Server Error"
