"""Context variable holder for the current request and response.

Uses Python's contextvars to store the request/response pair of the request
being processed, so code anywhere in the call stack can reach them without
explicit parameter passing. Every thread starts with an empty context, so a
binding never leaks into another worker thread; asyncio tasks and
``ContextThread`` inherit a snapshot of the context they were spawned from.
"""

from __future__ import annotations

import contextvars
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, ClassVar

from .exceptions import NoBoundRequestError, NoBoundResponseError
from .sessions import HttpSession, rotate_session, session_provider_for


class HTTPContext:
    """Holder of the current request and response.

    Usage:
        context = HTTPContext.get_instance()

        # Normally done by BindingFilter or HTTPContextMiddleware
        with context.bound(request, response):
            handle(request)

        # Anywhere below the filter
        request = context.current_request()
        context.add_response_header("X-Trace", "1")

    The process-wide instance comes from ``get_instance()``. Instances can
    also be created directly and handed to the filter or middleware; each
    instance has its own slots.
    """

    _instance: ClassVar[HTTPContext | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        name: str = "http_context",
        logger: logging.Logger | None = None,
    ) -> None:
        self._request: ContextVar[Any | None] = ContextVar(f"{name}.request", default=None)
        self._response: ContextVar[Any | None] = ContextVar(f"{name}.response", default=None)
        self._logger = logger

    @classmethod
    def get_instance(cls) -> HTTPContext:
        """Return the process-wide instance, creating it on first use.

        Each subclass gets its own instance.
        """
        instance = cls.__dict__.get("_instance")
        if instance is None:
            with cls._instance_lock:
                instance = cls.__dict__.get("_instance")
                if instance is None:
                    instance = cls()
                    cls._instance = instance
        return instance

    def bind(self, request: Any, response: Any) -> None:
        """Bind a request/response pair to the current context.

        Must be paired with ``unbind()`` in a ``finally`` block, or use
        ``bound()`` instead.
        """
        self._request.set(request)
        self._response.set(response)

    def unbind(self) -> None:
        """Clear the request/response pair. Safe to call when nothing is bound."""
        self._request.set(None)
        self._response.set(None)

    @contextmanager
    def bound(self, request: Any, response: Any) -> Iterator[None]:
        """Bind for the duration of a ``with`` block, unbinding on every exit."""
        self.bind(request, response)
        try:
            yield
        finally:
            self.unbind()

    def current_request(self) -> Any | None:
        """Get the request bound to the current context, or None."""
        return self._request.get()

    def current_response(self) -> Any | None:
        """Get the response bound to the current context, or None."""
        return self._response.get()

    @staticmethod
    def append_header(response: Any, name: str, value: str) -> None:
        """Append a header to the given response, keeping existing values.

        Works with Starlette-style headers (``append``) and Werkzeug-style
        headers (``add``).
        """
        headers = response.headers
        if hasattr(headers, "append"):
            headers.append(name, value)
        else:
            headers.add(name, value)

    def add_response_header(self, name: str, value: str) -> None:
        """Append a header to the bound response.

        Raises:
            NoBoundResponseError: If no response is bound.
        """
        response = self.current_response()
        if response is None:
            raise NoBoundResponseError()
        self.append_header(response, name, value)

    def change_session_identifier(self, request: Any | None = None) -> HttpSession:
        """Rotate the session of ``request`` (default: the bound request).

        Returns:
            The new session, holding the old session's attributes and expiry.

        Raises:
            NoBoundRequestError: If no request is given and none is bound.
            SessionContextError: If the request has no session provider.
            SessionRotationError: If the host fails to rotate the session.
        """
        if request is None:
            request = self.current_request()
            if request is None:
                raise NoBoundRequestError()
        return rotate_session(session_provider_for(request), logger=self._logger)


class ContextThread(threading.Thread):
    """Thread that runs its target inside a copy of the creator's context.

    The request/response bound when the thread object is created stay
    visible to it even after the parent unbinds.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._context = contextvars.copy_context()

    def run(self) -> None:
        self._context.run(super().run)


def get_context() -> HTTPContext:
    """Get the process-wide HTTPContext."""
    return HTTPContext.get_instance()


def get_current_request() -> Any | None:
    """Get the request bound by the process-wide HTTPContext, or None."""
    return HTTPContext.get_instance().current_request()


def get_current_response() -> Any | None:
    """Get the response bound by the process-wide HTTPContext, or None."""
    return HTTPContext.get_instance().current_response()


def add_response_header(name: str, value: str) -> None:
    """Append a header to the response bound by the process-wide HTTPContext.

    Raises:
        NoBoundResponseError: If no response is bound.
    """
    HTTPContext.get_instance().add_response_header(name, value)
