from __future__ import annotations
from typing import Any, Dict, List, Optional, Type


class ConfigurationError(Exception):
    """Missing or unusable credential/config material (detected before any request)."""


class ApiError(Exception):
    """Error returned by the API. Built from a response via `from_response`."""

    def __init__(self, message: str = '', status_code: Optional[int] = None, code: Optional[int] = None,
                 errors: Optional[List[Dict[str, Any]]] = None, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.errors = list(errors or [])
        self.field_errors = dict(field_errors or {})

    @classmethod
    def from_response(cls, response) -> 'ApiError':
        body = _parse_body(response)
        message, code, errors, field_errors = _extract_error(body)
        if not message:
            message = response.reason or ''
        return cls(message, status_code=response.status_code, code=code, errors=errors, field_errors=field_errors)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r}, code={self.code!r})"


class ClientError(ApiError):
    """Generic 4xx error."""

class BadRequest(ClientError):
    """400"""

class Unauthorized(ClientError):
    """401"""

class Forbidden(ClientError):
    """403"""

class NotFound(ClientError):
    """404"""

class NotAcceptable(ClientError):
    """406"""

class Gone(ClientError):
    """410"""

class RequestEntityTooLarge(ClientError):
    """413"""

class UnprocessableEntity(ClientError):
    """422"""

class TooManyRequests(ClientError):
    """429 (and the legacy 420)."""

class EnhanceYourCalm(TooManyRequests):
    """420, kept for older endpoints that still answer with it."""


# 403 refinements. The API reuses 403 for these and only the message tells them apart.
class InvalidOrExpiredToken(Forbidden, Unauthorized):
    """403 "Invalid or expired token"."""

class DuplicateStatus(Forbidden):
    """403 "Status is a duplicate."."""

class AlreadyFavorited(Forbidden):
    """403 when favoriting twice."""

class AlreadyRetweeted(Forbidden):
    """403 when retweeting twice."""


class ServerError(ApiError):
    """Generic 5xx error."""

class InternalServerError(ServerError):
    """500"""

class BadGateway(ServerError):
    """502"""

class ServiceUnavailable(ServerError):
    """503"""

class GatewayTimeout(ServerError):
    """504"""


ERRORS: Dict[int, Type[ApiError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    406: NotAcceptable,
    410: Gone,
    413: RequestEntityTooLarge,
    420: EnhanceYourCalm,
    422: UnprocessableEntity,
    429: TooManyRequests,
    500: InternalServerError,
    502: BadGateway,
    503: ServiceUnavailable,
    504: GatewayTimeout,
}

FORBIDDEN_MESSAGES: Dict[str, Type[Forbidden]] = {
    'Invalid or expired token': InvalidOrExpiredToken,
    'Status is a duplicate.': DuplicateStatus,
    'You have already favorited this status.': AlreadyFavorited,
    'You have already retweeted this Tweet.': AlreadyRetweeted,
    'sharing is not permissible for this status (Share validations failed)': AlreadyRetweeted,
}


def classify(response) -> Optional[ApiError]:
    """Map a response to its ApiError, or None when the status is a success.

    Statuses missing from ERRORS still fail when they are in the 4xx/5xx range.
    """
    status = response.status_code
    klass = ERRORS.get(status)
    if klass is Forbidden:
        return _forbidden_error(response)
    if klass is not None:
        return klass.from_response(response)
    if 400 <= status < 500:
        return ClientError.from_response(response)
    if 500 <= status < 600:
        return ServerError.from_response(response)
    return None


def _forbidden_error(response) -> ApiError:
    error = Forbidden.from_response(response)
    klass = FORBIDDEN_MESSAGES.get(error.message)
    if klass is None:
        return error
    return klass.from_response(response)


def _parse_body(response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _extract_error(body: Any):
    message = ''
    code = None
    errors: List[Dict[str, Any]] = []
    field_errors: Dict[str, str] = {}
    if not isinstance(body, dict):
        return message, code, errors, field_errors

    raw = body.get('errors')
    if isinstance(raw, list):
        errors = [e for e in raw if isinstance(e, dict)]
        if errors:
            first = errors[0]
            message = str(first.get('message') or first.get('detail') or '')
            code = first.get('code')
        for entry in errors:
            entry_message = str(entry.get('message') or entry.get('detail') or '')
            field = entry.get('parameter') or entry.get('field')
            if field:
                field_errors[str(field)] = entry_message
            params = entry.get('parameters')
            if isinstance(params, dict):
                for name in params:
                    field_errors[str(name)] = entry_message
    elif isinstance(raw, str):
        message = raw

    if not message:
        for key in ('error', 'detail', 'title'):
            if isinstance(body.get(key), str) and body[key]:
                message = body[key]
                break
    return message, code, errors, field_errors
