"""
API error taxonomy

Every operation raises one of these; the handler installed in main.py turns
them into ``{"message": ...}`` responses with the matching HTTP status.
"""

from typing import Optional


class BookingAPIError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BookingAPIError):
    status_code = 400
    default_message = "Invalid request"


class InvalidCredentials(BookingAPIError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthenticated(BookingAPIError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(BookingAPIError):
    status_code = 403
    default_message = "Invalid or expired token"


class NotFound(BookingAPIError):
    status_code = 404
    default_message = "Not found"


class Conflict(BookingAPIError):
    # The admin client treats a duplicate date as a plain bad request.
    status_code = 400
    default_message = "Already exists"


class PayloadTooLarge(BookingAPIError):
    status_code = 413
    default_message = "File too large"


class UnsupportedMedia(BookingAPIError):
    status_code = 415
    default_message = "Only images and PDFs are allowed"


class InternalError(BookingAPIError):
    pass
