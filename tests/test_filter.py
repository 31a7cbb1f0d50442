"""Tests for BindingFilter."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from http_context import BindingFilter, FilterConfig, HTTPContext


class TestBindingFilterLifecycle:
    """Tests for init/destroy hooks."""

    def test_default_config(self, context: HTTPContext) -> None:
        """Test that a fresh filter uses the default FilterConfig."""
        binding_filter = BindingFilter(context)

        assert binding_filter.config == FilterConfig()
        assert binding_filter.config.suppress_exceptions == ()

    def test_init_stores_config(self, context: HTTPContext) -> None:
        """Test that init() keeps the given config."""
        binding_filter = BindingFilter(context)
        config = FilterConfig(name="api")

        binding_filter.init(config)

        assert binding_filter.config is config

    def test_config_setter(self, context: HTTPContext) -> None:
        """Test that the config can be replaced after init()."""
        binding_filter = BindingFilter(context)
        binding_filter.init(FilterConfig(name="first"))

        binding_filter.config = FilterConfig(name="second", suppress_exceptions=(OSError,))

        assert binding_filter.config.name == "second"
        binding_filter.do_filter(object(), object(), self._raise_os_error)
        assert context.current_request() is None

    @staticmethod
    def _raise_os_error(req: Any, resp: Any) -> None:
        raise OSError("reset")

    def test_destroy_is_noop(self, context: HTTPContext) -> None:
        """Test that destroy() leaves the context untouched."""
        binding_filter = BindingFilter(context)
        binding_filter.init(FilterConfig())
        context.bind("request", "response")

        binding_filter.destroy()

        assert context.current_request() == "request"
        context.unbind()

    def test_uses_default_context_when_none_given(self) -> None:
        """Test that the process-wide context is used by default."""
        binding_filter = BindingFilter()

        assert binding_filter.context is HTTPContext.get_instance()


class TestBindingFilterDoFilter:
    """Tests for BindingFilter.do_filter()."""

    def test_binds_during_chain(self, context: HTTPContext) -> None:
        """Test that downstream code sees the request and response."""
        binding_filter = BindingFilter(context)
        request, response = object(), object()
        seen: list[Any] = []

        def chain(req: Any, resp: Any) -> None:
            seen.append(context.current_request())
            seen.append(context.current_response())

        binding_filter.do_filter(request, response, chain)

        assert seen == [request, response]

    def test_chain_receives_request_and_response(self, context: HTTPContext) -> None:
        """Test that the chain is invoked once with the same objects."""
        binding_filter = BindingFilter(context)
        request, response = object(), object()
        calls: list[tuple[Any, Any]] = []

        binding_filter.do_filter(request, response, lambda req, resp: calls.append((req, resp)))

        assert calls == [(request, response)]

    def test_unbinds_after_normal_completion(self, context: HTTPContext) -> None:
        """Test that the binding is cleared after the chain returns."""
        binding_filter = BindingFilter(context)

        binding_filter.do_filter(object(), object(), lambda req, resp: None)

        assert context.current_request() is None
        assert context.current_response() is None

    def test_propagates_and_unbinds_by_default(self, context: HTTPContext) -> None:
        """Test that errors propagate by default, after unbinding."""
        binding_filter = BindingFilter(context)

        def chain(req: Any, resp: Any) -> None:
            raise OSError("broken pipe")

        with pytest.raises(OSError, match="broken pipe"):
            binding_filter.do_filter(object(), object(), chain)

        assert context.current_request() is None
        assert context.current_response() is None

    def test_suppresses_configured_exceptions(self, context: HTTPContext) -> None:
        """Test that configured exception types are swallowed."""
        binding_filter = BindingFilter(context)
        binding_filter.init(FilterConfig(suppress_exceptions=(OSError,)))

        def chain(req: Any, resp: Any) -> None:
            raise ConnectionResetError("client went away")

        binding_filter.do_filter(object(), object(), chain)

        assert context.current_request() is None

    def test_other_exceptions_propagate_when_suppressing(self, context: HTTPContext) -> None:
        """Test that only the configured types are swallowed."""
        binding_filter = BindingFilter(context)
        binding_filter.init(FilterConfig(suppress_exceptions=(OSError,)))

        def chain(req: Any, resp: Any) -> None:
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            binding_filter.do_filter(object(), object(), chain)

        assert context.current_request() is None
        assert context.current_response() is None

    def test_base_exceptions_propagate_and_unbind(self, context: HTTPContext) -> None:
        """Test that non-Exception errors still trigger the unbind."""
        binding_filter = BindingFilter(context)
        binding_filter.init(FilterConfig(suppress_exceptions=(Exception,)))

        def chain(req: Any, resp: Any) -> None:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            binding_filter.do_filter(object(), object(), chain)

        assert context.current_request() is None

    def test_clears_stale_binding_on_reused_thread(self, context: HTTPContext) -> None:
        """Test that a second request on the same thread never sees the first."""
        binding_filter = BindingFilter(context)
        seen: list[Any] = []

        binding_filter.do_filter("first", "r1", lambda req, resp: None)
        seen.append(context.current_request())
        binding_filter.do_filter("second", "r2", lambda req, resp: seen.append(context.current_request()))

        assert seen == [None, "second"]


class TestBindingFilterLogging:
    """Tests for filter log output."""

    def test_logs_binding_and_clearing(
        self, context: HTTPContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test debug messages around the chain."""
        logger = logging.getLogger("test.filter")
        binding_filter = BindingFilter(context, logger=logger)
        binding_filter.init(FilterConfig(name="api"))

        with caplog.at_level(logging.DEBUG, logger="test.filter"):
            binding_filter.do_filter(object(), object(), lambda req, resp: None)

        messages = [record.getMessage() for record in caplog.records]
        assert "api: binding request and response" in messages
        assert "api: clearing request and response" in messages

    def test_logs_suppressed_exception(
        self, context: HTTPContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that a swallowed exception is logged with its traceback."""
        logger = logging.getLogger("test.filter")
        binding_filter = BindingFilter(context, logger=logger)
        binding_filter.init(FilterConfig(name="api", suppress_exceptions=(OSError,)))

        def chain(req: Any, resp: Any) -> None:
            raise OSError("disk full")

        with caplog.at_level(logging.DEBUG, logger="test.filter"):
            binding_filter.do_filter(object(), object(), chain)

        errors = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].getMessage() == "api: filter processing exception"
        assert errors[0].exc_info is not None
