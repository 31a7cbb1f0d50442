"""Binding filter for synchronous, thread-per-request hosts.

Binds the request/response pair before the rest of the chain runs and
always unbinds it afterwards, so a pooled worker thread never sees the
previous request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .config import FilterConfig
from .context import HTTPContext

FilterChain = Callable[[Any, Any], Any]


class BindingFilter:
    """Filter that binds request and response to an HTTPContext.

    Usage:
        binding_filter = BindingFilter(logger=logging.getLogger("http"))
        binding_filter.init(FilterConfig(name="app"))

        # Called by the host once per request
        binding_filter.do_filter(request, response, next_stage)

        binding_filter.destroy()

    Exceptions raised by the chain propagate unless their type is listed in
    ``FilterConfig.suppress_exceptions``; those are logged and swallowed.
    """

    def __init__(
        self,
        context: HTTPContext | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the filter.

        Args:
            context: Holder to bind into. Uses the process-wide one if None.
            logger: Optional logger for debugging.
        """
        self._context = context or HTTPContext.get_instance()
        self._logger = logger
        self._config = FilterConfig()

    @property
    def config(self) -> FilterConfig:
        return self._config

    @config.setter
    def config(self, config: FilterConfig) -> None:
        self._config = config

    @property
    def context(self) -> HTTPContext:
        return self._context

    def init(self, config: FilterConfig) -> None:
        """Store the filter configuration (host lifecycle hook)."""
        self._config = config
        if self._logger:
            self._logger.debug("Filter initialized: %s", config.name)

    def destroy(self) -> None:
        """Host lifecycle hook. Nothing to release."""
        if self._logger:
            self._logger.debug("Filter destroyed: %s", self._config.name)

    def do_filter(self, request: Any, response: Any, chain: FilterChain) -> None:
        """Run the rest of the chain with request and response bound."""
        if self._logger:
            self._logger.debug("%s: binding request and response", self._config.name)
        self._context.bind(request, response)
        try:
            chain(request, response)
        except self._config.suppress_exceptions:
            if self._logger:
                self._logger.exception("%s: filter processing exception", self._config.name)
        finally:
            if self._logger:
                self._logger.debug("%s: clearing request and response", self._config.name)
            self._context.unbind()
