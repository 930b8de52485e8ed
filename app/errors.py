"""Domain errors raised by the services.

Every subclass carries the HTTP status it maps to and a message that is safe
to show to the caller. Upstream details are logged, never put in the message.
"""

from __future__ import annotations


class AppError(Exception):
    status_code: int = 400
    default_message: str = "Bad request."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Invalid input."


class NameRequired(ValidationFailed):
    default_message = "name is required"


class CaptchaFailed(AppError):
    status_code = 400
    default_message = "Captcha verification failed."


class Unauthenticated(AppError):
    status_code = 401
    default_message = "unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "not found"


class NotFoundOrAlreadyProcessed(NotFound):
    """Missing and already-processed requests are reported the same way."""

    default_message = "request not found or already processed"


class NotFoundOrNotPending(NotFound):
    default_message = "request not found or not pending"


class TooSoon(AppError):
    status_code = 429
    default_message = "You can vote for this server again in 12 hours."


class UpstreamError(AppError):
    status_code = 502
    default_message = "Upstream service failed."
