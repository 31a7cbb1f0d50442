"""Configuration dataclasses for the binding filter and sessions.

Provides configuration objects instead of global settings,
making the filter and middleware portable and testable.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import DEFAULT_FILTER_NAME, DEFAULT_MAX_INACTIVE_INTERVAL


@dataclass(frozen=True)
class FilterConfig:
    """Configuration handed to a binding filter on ``init()``.

    Besides the name, this carries one real option: ``suppress_exceptions``
    is where the deployer decides whether downstream failures are swallowed
    by the filter or propagated to the host server. Nothing is swallowed
    unless listed here.

    Attributes:
        name: Filter name used in log messages.
        suppress_exceptions: Exception types raised downstream that the filter
            logs and swallows instead of propagating. Empty by default, so
            every failure reaches the host server.

    Example:
        >>> config = FilterConfig(
        ...     name="api",
        ...     suppress_exceptions=(ConnectionResetError,),
        ... )
    """

    name: str = DEFAULT_FILTER_NAME
    suppress_exceptions: tuple[type[Exception], ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.name:
            raise ValueError("name cannot be empty")
        for exc_type in self.suppress_exceptions:
            if not (isinstance(exc_type, type) and issubclass(exc_type, Exception)):
                raise ValueError(
                    f"suppress_exceptions entries must be Exception subclasses, got {exc_type!r}"
                )


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for session handling in the middleware.

    Attributes:
        max_inactive_interval: Expiry in seconds given to new sessions and to
            host sessions that carry no expiry of their own.

    Example:
        >>> config = SessionConfig(max_inactive_interval=3600)
        >>> app.add_middleware(HTTPContextMiddleware, session_config=config)
    """

    max_inactive_interval: int = DEFAULT_MAX_INACTIVE_INTERVAL

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_inactive_interval <= 0:
            raise ValueError("max_inactive_interval must be positive")
