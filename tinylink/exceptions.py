"""Error taxonomy shared by the store, the service layer and the HTTP surface.

Every error carries the HTTP status it maps to and a message that is safe to
show to clients. Internal details stay in the logs.
"""

from typing import Optional


class TinyLinkError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidUrlError(TinyLinkError):
    status_code = 400
    message = "Invalid URL"


class InvalidCodeError(TinyLinkError):
    status_code = 400
    message = "Code must be 6-8 characters, letters and numbers only"


class DuplicateCodeError(TinyLinkError):
    status_code = 409
    message = "Code already exists"


class LinkNotFoundError(TinyLinkError):
    status_code = 404
    message = "Not found"


class CodeGenerationError(TinyLinkError):
    """Random code selection kept colliding with existing codes."""


class StoreUnavailableError(TinyLinkError):
    """The database failed or aborted the transaction."""
