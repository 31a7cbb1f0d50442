"""Starlette/FastAPI middleware binding request and response to HTTPContext.

The real response does not exist until the endpoint returns, so the
middleware binds an empty pending ``Response``; headers appended to it during
processing are merged into the real response afterwards.

When Starlette's ``SessionMiddleware`` wraps this middleware, the host session
mapping (``request.session``) is exposed as a ``RequestSessions`` at
``request.state.sessions`` so sessions can be rotated. Storage stays with the
host: the outcome is written back into the same mapping and
``SessionMiddleware`` persists it.

Install with: pip install py-http-context[starlette]
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ..config import FilterConfig, SessionConfig
from ..constants import MAX_INACTIVE_INTERVAL_KEY, RESERVED_SESSION_KEYS, SESSION_ID_KEY
from ..context import HTTPContext
from ..sessions import RequestSessions, Session, generate_session_id


def load_session(
    data: MutableMapping[str, Any],
    max_inactive_interval: int,
) -> Session | None:
    """Build a Session from a host session mapping.

    A mapping without an identity but with attributes (written by code that
    uses ``request.session`` directly) is adopted under a fresh ID.

    Returns:
        The session, or None if the mapping is empty.
    """
    attributes = {k: v for k, v in data.items() if k not in RESERVED_SESSION_KEYS}
    session_id = data.get(SESSION_ID_KEY)
    if not isinstance(session_id, str) or not session_id:
        if not attributes:
            return None
        session_id = generate_session_id()

    interval = data.get(MAX_INACTIVE_INTERVAL_KEY)
    if not isinstance(interval, int) or interval <= 0:
        interval = max_inactive_interval
    return Session(session_id, attributes=attributes, max_inactive_interval=interval)


def store_session(data: MutableMapping[str, Any], session: Session | None) -> None:
    """Replace the contents of a host session mapping in place.

    An empty mapping makes ``SessionMiddleware`` expire the session cookie.
    """
    data.clear()
    if session is None:
        return
    data.update(session.attributes)
    data[SESSION_ID_KEY] = session.id
    data[MAX_INACTIVE_INTERVAL_KEY] = session.max_inactive_interval


class HTTPContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds request/response for the duration of a request.

    Usage:
        from fastapi import FastAPI
        from starlette.middleware.sessions import SessionMiddleware
        from http_context import add_response_header, get_current_request
        from http_context.contrib.starlette import HTTPContextMiddleware

        app = FastAPI()
        app.add_middleware(HTTPContextMiddleware, logger=logging.getLogger("http"))
        # Added last so it wraps HTTPContextMiddleware
        app.add_middleware(SessionMiddleware, secret_key=settings.SECRET_KEY)
    """

    def __init__(
        self,
        app: ASGIApp,
        context: HTTPContext | None = None,
        config: FilterConfig | None = None,
        session_config: SessionConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            context: Holder to bind into. Uses the process-wide one if None.
            config: Filter configuration. Uses defaults if None.
            session_config: Session defaults. Uses defaults if None.
            logger: Optional logger for debugging.
        """
        super().__init__(app)
        self._context = context or HTTPContext.get_instance()
        self._config = config or FilterConfig()
        self._session_config = session_config or SessionConfig()
        self._logger = logger

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request with request and pending response bound."""
        sessions: RequestSessions | None = None
        if "session" in request.scope:
            max_inactive_interval = self._session_config.max_inactive_interval
            sessions = RequestSessions(
                load_session(request.session, max_inactive_interval),
                max_inactive_interval=max_inactive_interval,
            )
            request.state.sessions = sessions

        pending = Response()
        del pending.headers["content-length"]

        if self._logger:
            self._logger.debug("%s: binding request and response", self._config.name)
        self._context.bind(request, pending)
        try:
            response = await call_next(request)
        except self._config.suppress_exceptions:
            if self._logger:
                self._logger.exception("%s: filter processing exception", self._config.name)
            response = Response(status_code=500)
        finally:
            if self._logger:
                self._logger.debug("%s: clearing request and response", self._config.name)
            self._context.unbind()

        response.headers.raw.extend(pending.headers.raw)

        # Untouched host sessions are left exactly as the endpoint left them
        if sessions is not None and sessions.accessed:
            store_session(request.session, sessions.current)
        return response
