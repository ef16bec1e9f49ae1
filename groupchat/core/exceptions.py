"""
Domain errors raised by stores and services.

Each error carries the HTTP status it is translated to at the API boundary
(see the ChatError handler in groupchat.main).
"""

from typing import Optional


class ChatError(Exception):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(ChatError):
    status_code = 404
    default_detail = "Not found"


class ForbiddenError(ChatError):
    status_code = 403
    default_detail = "Forbidden"


class ConflictError(ChatError):
    status_code = 400
    default_detail = "Conflict"


class InvalidError(ChatError):
    status_code = 400
    default_detail = "Invalid request"


class InternalError(ChatError):
    """Unexpected store or relay failure. Never carries caller-facing detail."""

    status_code = 500

    def __init__(self):
        super().__init__(None)
