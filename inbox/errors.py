"""
Domain errors for the direct-messaging subsystem.

They extend HTTPException so services can raise them directly and FastAPI
renders them with the right status code. ``code`` is a stable identifier
clients can switch on; ``detail`` is human readable.
"""
from fastapi import HTTPException


class DMError(HTTPException):
    status_code = 400
    code = 'dm_error'
    default_detail = 'Request rejected'

    def __init__(self, detail: str | None = None):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)


class Unauthenticated(DMError):
    status_code = 401
    code = 'unauthenticated'
    default_detail = 'Not authenticated'

    def __init__(self, detail: str | None = None):
        super().__init__(detail)
        self.headers = {'WWW-Authenticate': 'Bearer'}


class Forbidden(DMError):
    status_code = 403
    code = 'forbidden'
    default_detail = 'Not authorized'


class NotFound(DMError):
    status_code = 404
    code = 'not_found'
    default_detail = 'Not found'


class RecipientNotFound(NotFound):
    code = 'recipient_not_found'
    default_detail = 'Other user not found'


class InvalidContent(DMError):
    status_code = 400
    code = 'invalid_content'
    default_detail = 'Invalid message content'


class InvalidRequest(DMError):
    status_code = 400
    code = 'invalid_request'
    default_detail = 'Invalid request'


class Conflict(DMError):
    status_code = 409
    code = 'conflict'
    default_detail = 'Conflict'


class InboxDisabled(DMError):
    status_code = 403
    code = 'inbox_disabled'
    default_detail = "This user's inbox is disabled"


class RateLimited(DMError):
    status_code = 429
    code = 'rate_limited'

    def __init__(self, scope: str, detail: str | None = None):
        self.scope = scope
        super().__init__(detail or f'Rate limit exceeded ({scope})')
