"""
Exceptions raised by gwsbatch.

Everything derives from GoogleSheetsError so a caller can catch the lot.
None of these are retried by the caller-facing API, the only retry that
happens is the internal rate limit back off before RateLimitExceededError.
"""

class GoogleSheetsError(Exception):
    """Base for all gwsbatch errors"""
    pass

class MalformedRangeError(GoogleSheetsError, ValueError):
    """
    A1 notation that cannot be turned into a grid range.
    Also a ValueError, which is what invalid ranges have always raised.
    """
    def __init__(self, a1: str|None, detail: str = "") -> None:
        self.a1 = a1
        msg = f"invalid A1 notation: {a1!r}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)

class RemoteError(GoogleSheetsError):
    """
    The service answered with a well formed error that is not worth retrying.
    status is the HTTP status of the response, reason its message.
    """
    def __init__(self, reason: str, status: int|None = None) -> None:
        self.reason = reason
        self.status = status
        super().__init__(f"[{status}] {reason}" if status is not None else reason)

class RateLimitExceededError(RemoteError):
    """Gave up after the retry ceiling while being rate limited."""
    def __init__(self, reason: str, attempts: int, status: int|None = None) -> None:
        self.attempts = attempts
        super().__init__(reason, status)

class TransportError(GoogleSheetsError):
    """Network level failure with no response from the service to go on."""
    pass
