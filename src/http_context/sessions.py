"""Session model and session identifier rotation.

The host owns session storage; this module only needs a session to expose
attribute enumeration, get/set by name, an expiry and ``invalidate()``.
``Session`` and ``RequestSessions`` implement that contract in memory on top
of host session storage that has no notion of identity or invalidation
(such as Starlette's ``request.session`` mapping).
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from .constants import DEFAULT_MAX_INACTIVE_INTERVAL, SESSION_ID_BYTES
from .exceptions import SessionContextError, SessionInvalidatedError, SessionRotationError


class HttpSession(Protocol):
    """Session contract consumed by ``rotate_session``."""

    @property
    def id(self) -> str: ...

    max_inactive_interval: int

    def attribute_names(self) -> Iterable[str] | None: ...

    def get_attribute(self, name: str) -> Any: ...

    def set_attribute(self, name: str, value: Any) -> None: ...

    def invalidate(self) -> None: ...


@runtime_checkable
class SessionProvider(Protocol):
    """Anything that hands out the current session, creating one on demand."""

    def get_session(self, create: bool = True) -> HttpSession | None: ...


def generate_session_id() -> str:
    """Return a fresh random session ID (32 hex characters)."""
    return secrets.token_hex(SESSION_ID_BYTES)


class Session:
    """In-memory session with attributes and an expiry.

    Once ``invalidate()`` is called every attribute or expiry access raises
    ``SessionInvalidatedError``; only ``id``, ``is_new`` and ``is_valid``
    stay readable.
    """

    def __init__(
        self,
        session_id: str,
        attributes: dict[str, Any] | None = None,
        max_inactive_interval: int = DEFAULT_MAX_INACTIVE_INTERVAL,
        is_new: bool = False,
    ) -> None:
        self._id = session_id
        self._attributes: dict[str, Any] = dict(attributes or {})
        self._max_inactive_interval = max_inactive_interval
        self._is_new = is_new
        self._valid = True

    def __repr__(self) -> str:
        state = "valid" if self._valid else "invalidated"
        return f"<Session {self._id[:8]}... {state}>"

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def is_valid(self) -> bool:
        return self._valid

    def _check_valid(self) -> None:
        if not self._valid:
            raise SessionInvalidatedError(self._id)

    @property
    def max_inactive_interval(self) -> int:
        self._check_valid()
        return self._max_inactive_interval

    @max_inactive_interval.setter
    def max_inactive_interval(self, seconds: int) -> None:
        self._check_valid()
        self._max_inactive_interval = seconds

    @property
    def attributes(self) -> dict[str, Any]:
        """Shallow copy of the attribute mapping."""
        self._check_valid()
        return dict(self._attributes)

    def attribute_names(self) -> list[str]:
        self._check_valid()
        return list(self._attributes)

    def get_attribute(self, name: str) -> Any:
        self._check_valid()
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self._check_valid()
        self._attributes[name] = value

    def remove_attribute(self, name: str) -> None:
        self._check_valid()
        self._attributes.pop(name, None)

    def invalidate(self) -> None:
        self._check_valid()
        self._valid = False
        self._attributes.clear()


class RequestSessions:
    """Per-request session provider.

    Wraps the session the request arrived with (if any), creates a new one
    on demand, and records which sessions were invalidated. ``accessed`` tells
    the host whether request code touched sessions at all, so untouched host
    storage can be left alone.
    """

    def __init__(
        self,
        session: Session | None = None,
        max_inactive_interval: int = DEFAULT_MAX_INACTIVE_INTERVAL,
    ) -> None:
        self._current = session
        self._original_id = session.id if session is not None else None
        self._max_inactive_interval = max_inactive_interval
        self._seen: list[Session] = [session] if session is not None else []
        self._accessed = False

    @property
    def current(self) -> Session | None:
        """The valid session of this request, or None."""
        if self._current is not None and self._current.is_valid:
            return self._current
        return None

    @property
    def original_id(self) -> str | None:
        """ID of the session the request arrived with."""
        return self._original_id

    @property
    def accessed(self) -> bool:
        """Whether ``get_session()`` was called during this request."""
        return self._accessed

    @property
    def invalidated_ids(self) -> list[str]:
        return [session.id for session in self._seen if not session.is_valid]

    def get_session(self, create: bool = True) -> Session | None:
        self._accessed = True
        current = self.current
        if current is not None or not create:
            return current

        session = Session(
            generate_session_id(),
            max_inactive_interval=self._max_inactive_interval,
            is_new=True,
        )
        self._current = session
        self._seen.append(session)
        return session


def session_provider_for(request: Any) -> SessionProvider:
    """Find the session provider for a request.

    The request itself is used when it offers ``get_session()``; otherwise
    ``request.state.sessions`` as installed by the Starlette middleware.

    Raises:
        SessionContextError: If neither is available.
    """
    if isinstance(request, SessionProvider):
        return request

    state = getattr(request, "state", None)
    provider = getattr(state, "sessions", None)
    if provider is None:
        raise SessionContextError()
    return provider


def rotate_session(
    provider: SessionProvider,
    logger: logging.Logger | None = None,
) -> HttpSession:
    """Replace the current session with a new one carrying the same data.

    Attributes (by reference) and the max inactive interval are copied over,
    then the old session is invalidated before the new one is requested, since
    some providers hand back the same identifier otherwise.

    Args:
        provider: Source of the current session; usually the request.
        logger: Optional logger for debugging.

    Returns:
        The new session.

    Raises:
        SessionRotationError: If the old session cannot be invalidated or no
            distinct new session can be obtained.

    Example:
        >>> new_session = rotate_session(request)
        >>> new_session.get_attribute("user")
        'alice'
    """
    old_session = provider.get_session(create=True)
    if old_session is None:
        raise SessionContextError("Session provider returned no session")
    old_id = old_session.id

    snapshot: dict[str, Any] = {}
    for name in old_session.attribute_names() or ():
        snapshot[name] = old_session.get_attribute(name)

    max_inactive_interval = old_session.max_inactive_interval

    try:
        old_session.invalidate()
        new_session = provider.get_session(create=True)
    except Exception as exc:
        raise SessionRotationError(old_id) from exc

    if new_session is None or new_session is old_session or new_session.id == old_id:
        raise SessionRotationError(
            old_id, f"Session provider reissued the same session for {old_id[:8]}..."
        )

    new_session.max_inactive_interval = max_inactive_interval
    for name, value in snapshot.items():
        new_session.set_attribute(name, value)

    if logger:
        logger.debug(
            "Session rotated: %s -> %s, attributes=%d",
            old_id[:8] + "...",
            new_session.id[:8] + "...",
            len(snapshot),
        )
    return new_session
