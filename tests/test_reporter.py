"""
Tests for the Reporter lifecycle and the run_report driver, using fake
Playwright objects (see conftest.py).
"""

import asyncio

import pytest

from dashreport.auth import AuthDescriptor, AuthMode
from dashreport.auth.form_login import SEARCH_GUARD_LOGIN_SELECTOR, XPACK_LOGIN_SELECTOR
from dashreport.errors import (
    AuthenticationError,
    CaptureError,
    LaunchError,
    NavigationError,
    ReporterStateError,
    TeardownError,
)
from dashreport.reporter import ReporterState, run_report

URL = "https://dash.example.com/app"


class _FailingContext:
    def __init__(self, error):
        self.error = error

    async def close(self):
        raise self.error


class _FakeDriver:
    stopped = False

    async def stop(self):
        self.stopped = True


# ====================================================================
# open_page + auth dispatch
# ====================================================================

class TestOpenPage:

    def test_no_auth(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        assert reporter.fake_page.calls == [("goto", URL, "networkidle")]
        assert reporter.state is ReporterState.PAGE_LOADED

    def test_custom_mode_runs_only_custom_strategy(self, make_reporter):
        reporter = make_reporter()
        auth = AuthDescriptor.from_flags("a", "b", custom=True)
        asyncio.run(reporter.open_page(URL, auth))

        page = reporter.fake_page
        assert page.calls == [
            ("goto", URL, "networkidle"),
            ("type", "#user", "a", 0),
            ("type", "#pass", "b", 0),
            ("click", ".btn-lg"),
        ]
        assert "set_extra_http_headers" not in page.names()
        assert reporter.state is ReporterState.AUTHENTICATED

    def test_basic_header_set_before_navigation(self, make_reporter):
        reporter = make_reporter()
        auth = AuthDescriptor("admin", "admin", AuthMode.BASIC)
        asyncio.run(reporter.open_page(URL, auth))

        page = reporter.fake_page
        assert page.names() == ["set_extra_http_headers", "goto"]
        assert page.calls[0][1] == {"Authorization": "Basic YWRtaW46YWRtaW4="}
        assert reporter.state is ReporterState.AUTHENTICATED

    def test_xpack_mode_clicks_xpack_button(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL, AuthDescriptor("u", "p", AuthMode.XPACK)))
        clicks = [c[1] for c in reporter.fake_page.calls if c[0] == "click"]
        assert XPACK_LOGIN_SELECTOR in clicks
        assert SEARCH_GUARD_LOGIN_SELECTOR not in clicks

    def test_searchguard_mode_clicks_fallback_button(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL, AuthDescriptor("u", "p", AuthMode.SEARCH_GUARD)))
        clicks = [c[1] for c in reporter.fake_page.calls if c[0] == "click"]
        assert clicks[0] == SEARCH_GUARD_LOGIN_SELECTOR

    def test_wait_until_from_config(self, make_reporter, make_config):
        reporter = make_reporter(make_config(wait_until="load"))
        asyncio.run(reporter.open_page(URL))
        assert reporter.fake_page.calls == [("goto", URL, "load")]

    def test_launch_failure(self, make_reporter):
        reporter = make_reporter(launch_error=RuntimeError("chromium missing"))
        with pytest.raises(LaunchError, match="fail to open headless chrome, chromium missing"):
            asyncio.run(reporter.open_page(URL))

    def test_navigation_failure_names_url(self, make_reporter, make_page):
        page = make_page(fail_on={"goto": TimeoutError("net::ERR_NAME_NOT_RESOLVED")})
        reporter = make_reporter(page=page)
        with pytest.raises(NavigationError) as exc:
            asyncio.run(reporter.open_page(URL))
        assert URL in str(exc.value)
        assert exc.value.url == URL

    def test_auth_failure_propagates(self, make_reporter, make_page):
        page = make_page(fail_on={"click": RuntimeError("no such element")})
        reporter = make_reporter(page=page)
        with pytest.raises(AuthenticationError):
            asyncio.run(reporter.open_page(URL, AuthDescriptor("a", "b", AuthMode.CUSTOM)))
        assert reporter.state is ReporterState.PAGE_LOADED

    def test_open_twice_rejected(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        with pytest.raises(ReporterStateError):
            asyncio.run(reporter.open_page(URL))


# ====================================================================
# Captures
# ====================================================================

class TestCaptures:

    def test_screenshot_sets_viewport_then_captures(self, make_reporter, targets):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        path = asyncio.run(reporter.screenshot())

        assert reporter.fake_page.calls[1:] == [
            ("set_viewport_size", {"width": 1280, "height": 900}),
            ("screenshot", str(targets.img.path)),
        ]
        assert path == targets.img.path
        assert path.parent.is_dir()
        assert reporter.state is ReporterState.CAPTURED

    def test_pdf_passes_target_options(self, make_reporter, targets):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        asyncio.run(reporter.pdf())

        name, options = reporter.fake_page.calls[-1]
        assert name == "pdf"
        assert options == {
            "path": str(targets.pdf.path),
            "format": "A4",
            "landscape": True,
            "print_background": False,
        }

    @pytest.mark.parametrize("method", ["screenshot", "pdf"])
    def test_capture_failure_contains_url(self, make_reporter, make_page, method):
        page = make_page(fail_on={method: RuntimeError("renderer crashed")})
        reporter = make_reporter(page=page)
        asyncio.run(reporter.open_page(URL))

        with pytest.raises(CaptureError) as exc:
            asyncio.run(getattr(reporter, method)())
        assert URL in str(exc.value)
        assert "renderer crashed" in str(exc.value)
        assert exc.value.operation == method

    @pytest.mark.parametrize("method", ["screenshot", "pdf"])
    def test_capture_before_open_rejected(self, make_reporter, method):
        reporter = make_reporter()
        with pytest.raises(ReporterStateError):
            asyncio.run(getattr(reporter, method)())


# ====================================================================
# Teardown
# ====================================================================

class TestEnd:

    def test_end_closes_browser(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        asyncio.run(reporter.end())
        assert reporter.fake_browser.closed
        assert reporter.state is ReporterState.CLOSED

    def test_end_twice_is_noop(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        asyncio.run(reporter.end())
        asyncio.run(reporter.end())
        assert reporter.state is ReporterState.CLOSED

    def test_close_failure_wrapped(self, make_reporter, make_browser):
        reporter = make_reporter(browser=make_browser(fail_on_close=RuntimeError("zombie")))
        asyncio.run(reporter.open_page(URL))
        with pytest.raises(TeardownError, match="fail to close headless chrome, zombie"):
            asyncio.run(reporter.end())

    def test_context_close_failure_still_closes_browser_and_driver(self, make_reporter):
        reporter = make_reporter()
        asyncio.run(reporter.open_page(URL))
        reporter._context = _FailingContext(RuntimeError("context gone"))
        driver = reporter._playwright = _FakeDriver()
        browser = reporter.fake_browser

        with pytest.raises(TeardownError, match="context gone"):
            asyncio.run(reporter.end())
        assert browser.closed
        assert driver.stopped
        assert reporter.state is ReporterState.CLOSED

    def test_context_close_failure_inside_context_manager(self, make_reporter, make_page):
        reporter = make_reporter(page=make_page(fail_on={"pdf": RuntimeError("boom")}))
        driver = _FakeDriver()

        async def scenario():
            async with reporter:
                await reporter.open_page(URL)
                reporter._context = _FailingContext(RuntimeError("context gone"))
                reporter._playwright = driver
                await reporter.pdf()

        with pytest.raises(CaptureError):
            asyncio.run(scenario())
        assert reporter.fake_browser.closed
        assert driver.stopped

    def test_context_manager_releases_browser_on_failure(self, make_reporter, make_page):
        page = make_page(fail_on={"pdf": RuntimeError("boom")})
        reporter = make_reporter(page=page)

        async def scenario():
            async with reporter:
                await reporter.open_page(URL)
                await reporter.pdf()

        with pytest.raises(CaptureError):
            asyncio.run(scenario())
        assert reporter.fake_browser.closed

    def test_teardown_error_does_not_mask_original(self, make_reporter, make_page, make_browser):
        reporter = make_reporter(
            page=make_page(fail_on={"goto": RuntimeError("unreachable")}),
            browser=make_browser(fail_on_close=RuntimeError("zombie")),
        )

        async def scenario():
            async with reporter:
                await reporter.open_page(URL)

        with pytest.raises(NavigationError):
            asyncio.run(scenario())


# ====================================================================
# Driver
# ====================================================================

class TestRunReport:

    def _factory(self, make_reporter, holder, **kwargs):
        def factory(targets, config):
            reporter = make_reporter(config, **kwargs)
            holder.append(reporter)
            return reporter
        return factory

    def test_pdf_then_screenshot_then_close(self, make_reporter, make_config, targets):
        created = []
        config = make_config(auth=AuthDescriptor("a", "b", AuthMode.CUSTOM))
        result = asyncio.run(run_report(config, self._factory(make_reporter, created)))

        reporter = created[0]
        names = reporter.fake_page.names()
        assert names.index("pdf") < names.index("screenshot")
        assert reporter.fake_browser.closed
        assert result.artifacts == [targets.pdf.path, targets.img.path]

    def test_inactive_targets_skipped(self, make_reporter, make_config, targets):
        targets.pdf.active = False
        created = []
        result = asyncio.run(run_report(make_config(), self._factory(make_reporter, created)))

        assert "pdf" not in created[0].fake_page.names()
        assert result.pdf_path is None
        assert result.screenshot_path == targets.img.path

    def test_failure_still_closes_browser(self, make_reporter, make_config, make_page):
        created = []
        factory = self._factory(
            make_reporter, created, page=make_page(fail_on={"pdf": RuntimeError("x")})
        )
        with pytest.raises(CaptureError):
            asyncio.run(run_report(make_config(), factory))
        assert created[0].fake_browser.closed
        assert "screenshot" not in created[0].fake_page.names()
