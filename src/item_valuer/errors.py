"""
Errors raised when talking to the upstream services
"""
from typing import Optional


class UpstreamError(Exception):
    """Non-success response from a service we depend on"""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ''):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamAuthError(UpstreamError):
    """The OAuth token endpoint rejected the credential exchange"""
    pass


class UpstreamFetchError(UpstreamError):
    """A search or identification call returned a non-success status"""
    pass


class ParseError(ValueError):
    """Free-text output from the vision service did not hold valid JSON.

    Never escapes the identification module: it is turned into a raw-text
    result there.
    """
    pass


class InputError(ValueError):
    """Request is missing something we need (maps to HTTP 400)"""
    pass


class IdentificationError(UpstreamError):
    """The vision service replied, but not with an identification we can search on"""
    pass
