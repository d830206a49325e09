"""
API error types.

Every error carries the message shown to the client and the HTTP status the
request handlers answer with. Services raise them; ``register_error_handlers``
in ``playerbook.app`` turns them into JSON responses.
"""


class ApiError(Exception):
    status_code = 500
    message = 'An unknown error occurred!'

    def __init__(self, message=None, status_code=None, details=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self):
        data = {'message': self.message, 'error': self.message}
        if self.details:
            data['details'] = self.details
        return data


class NotFound(ApiError):
    """Referenced academy or player does not exist"""
    status_code = 404
    message = 'Could not find the requested resource.'


class Unauthorized(ApiError):
    """Authenticated academy does not own the player"""
    status_code = 401
    message = 'You are not allowed to modify this player.'


class TransactionFailed(ApiError):
    """Atomic multi-document write could not commit"""
    status_code = 500
    message = 'Something went wrong, please try again later.'


class ValidationFailed(ApiError):
    status_code = 422
    message = 'Invalid inputs passed, please check your data.'


class AcademyExists(ApiError):
    status_code = 422
    message = 'Academy exists already, please login instead.'


class InvalidCredentials(ApiError):
    status_code = 403
    message = 'Invalid credentials, could not log you in.'


class GeocodeNotFound(ApiError):
    status_code = 422
    message = 'Could not find location for the specified address.'


class GeocodingFailed(ApiError):
    status_code = 502
    message = 'Could not reach the geocoding service, please try again later.'


class InvalidImage(ApiError):
    status_code = 422
    message = 'Invalid image file.'
