"""Access the current HTTP request and response from anywhere in a call stack.

A binding filter stores the request/response pair in context variables for
the duration of one request; code below it reads them back without having
them passed as parameters.

Basic usage:
    from http_context import BindingFilter, FilterConfig, get_current_request

    binding_filter = BindingFilter()
    binding_filter.init(FilterConfig(name="app"))

    def handler(request, response):
        assert get_current_request() is request

    binding_filter.do_filter(request, response, handler)

With FastAPI/Starlette:
    from http_context import add_response_header, get_context
    from http_context.contrib.starlette import HTTPContextMiddleware

    app = FastAPI()
    app.add_middleware(HTTPContextMiddleware)
    app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)

    @app.post("/login")
    async def login() -> dict[str, str]:
        session = get_context().change_session_identifier()
        session.set_attribute("user", "alice")
        add_response_header("X-Login", "ok")
        return {"status": "ok"}
"""

from __future__ import annotations

from .config import FilterConfig, SessionConfig
from .constants import DEFAULT_FILTER_NAME, DEFAULT_MAX_INACTIVE_INTERVAL
from .context import (
    ContextThread,
    HTTPContext,
    add_response_header,
    get_context,
    get_current_request,
    get_current_response,
)
from .exceptions import (
    HTTPContextError,
    NoBoundRequestError,
    NoBoundResponseError,
    SessionContextError,
    SessionError,
    SessionInvalidatedError,
    SessionRotationError,
)
from .filter import BindingFilter
from .sessions import (
    HttpSession,
    RequestSessions,
    Session,
    SessionProvider,
    generate_session_id,
    rotate_session,
    session_provider_for,
)

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "HTTPContext",
    "BindingFilter",
    "ContextThread",
    "FilterConfig",
    "SessionConfig",
    # Sessions
    "HttpSession",
    "SessionProvider",
    "Session",
    "RequestSessions",
    "rotate_session",
    "session_provider_for",
    "generate_session_id",
    # Exceptions
    "HTTPContextError",
    "NoBoundRequestError",
    "NoBoundResponseError",
    "SessionError",
    "SessionInvalidatedError",
    "SessionRotationError",
    "SessionContextError",
    # Context helpers
    "get_context",
    "get_current_request",
    "get_current_response",
    "add_response_header",
    # Constants
    "DEFAULT_FILTER_NAME",
    "DEFAULT_MAX_INACTIVE_INTERVAL",
]
