"""Custom exceptions for request context binding and sessions.

Provides a hierarchy of exceptions so callers can tell binding misuse
apart from session failures.
"""

from __future__ import annotations


class HTTPContextError(Exception):
    """Base exception for all http_context errors."""


class NoBoundRequestError(HTTPContextError):
    """Raised when an operation needs the current request but none is bound.

    Usually means the code runs outside a request, or the binding filter
    is not installed in front of it.
    """

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "No request bound to the current context - binding filter not installed?"
        super().__init__(message)


class NoBoundResponseError(HTTPContextError):
    """Raised when an operation needs the current response but none is bound."""

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "No response bound to the current context - binding filter not installed?"
        super().__init__(message)


class SessionError(HTTPContextError):
    """Base exception for session-related errors.

    All session-specific exceptions inherit from this class,
    allowing callers to catch all session errors with a single except clause.
    """


class SessionInvalidatedError(SessionError):
    """Raised when an invalidated session is used.

    Attributes:
        session_id: The invalidated session ID (truncated for security).
    """

    def __init__(
        self,
        session_id: str,
        message: str | None = None,
    ) -> None:
        self.session_id = session_id[:8] + "..." if len(session_id) > 8 else session_id
        if message is None:
            message = f"Session already invalidated: {self.session_id}"
        super().__init__(message)


class SessionRotationError(SessionError):
    """Raised when a session identifier could not be rotated.

    The old session may already be invalidated when this is raised; the
    caller never receives a partially rotated session.

    Attributes:
        session_id: The session ID being rotated (truncated for security).
    """

    def __init__(
        self,
        session_id: str,
        message: str | None = None,
    ) -> None:
        self.session_id = session_id[:8] + "..." if len(session_id) > 8 else session_id
        if message is None:
            message = f"Could not rotate session {self.session_id}"
        super().__init__(message)


class SessionContextError(SessionError):
    """Raised when no session provider is reachable from the request.

    This occurs when session rotation is attempted on a request that neither
    offers ``get_session()`` nor carries ``state.sessions`` (the host session
    middleware is not set up).
    """

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "No session provider on request - SessionMiddleware not installed around HTTPContextMiddleware"
        super().__init__(message)
