"""
Shared fakes for the Playwright page / browser objects.

``FakePage`` records every call as a tuple ``(method, *args)`` so tests can
assert on ordering.  ``fail_on`` maps a method name to the exception it
should raise (after recording the call).
"""

import pytest

from dashreport.reporter import Reporter
from dashreport.run_config import FileTargets, ImageTarget, PdfTarget, ReportRunConfig


class FakePage:
    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on or {}
        self.headers = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        exc = self.fail_on.get(name)
        if exc is not None:
            raise exc

    def names(self):
        return [c[0] for c in self.calls]

    async def type(self, selector, text, delay=None):
        self._record("type", selector, text, delay)

    async def click(self, selector):
        self._record("click", selector)

    async def set_extra_http_headers(self, headers):
        self._record("set_extra_http_headers", dict(headers))
        self.headers.update(headers)

    async def goto(self, url, wait_until=None, timeout=None):
        self._record("goto", url, wait_until)

    async def set_viewport_size(self, size):
        self._record("set_viewport_size", dict(size))

    async def screenshot(self, path=None, full_page=False):
        self._record("screenshot", path)

    async def pdf(self, **options):
        self._record("pdf", options)


class FakeBrowser:
    def __init__(self, fail_on_close=None):
        self.closed = False
        self.fail_on_close = fail_on_close

    async def close(self):
        if self.fail_on_close is not None:
            raise self.fail_on_close
        self.closed = True


class FakeReporter(Reporter):
    """Reporter whose browser launch hands back the fakes."""

    def __init__(self, targets, config=None, *, page=None, browser=None, launch_error=None):
        super().__init__(targets, config)
        self.fake_page = page or FakePage()
        self.fake_browser = browser or FakeBrowser()
        self.launch_error = launch_error

    async def _launch_browser(self):
        if self.launch_error is not None:
            raise self.launch_error
        self._browser = self.fake_browser
        self.page = self.fake_page


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def targets(tmp_path):
    return FileTargets(
        pdf=PdfTarget(path=tmp_path / "out" / "doc.pdf", format="A4", landscape=True),
        img=ImageTarget(path=tmp_path / "out" / "shot.png", width=1280, height=900),
    )


@pytest.fixture
def make_config(targets):
    def _make(**overrides):
        overrides.setdefault("url", "https://dash.example.com/app")
        overrides.setdefault("targets", targets)
        overrides.setdefault("load_delay_ms", 0)
        return ReportRunConfig(**overrides)
    return _make


@pytest.fixture
def make_reporter(make_config):
    def _make(config=None, **kwargs):
        config = config or make_config()
        return FakeReporter(config.targets, config, **kwargs)
    return _make


@pytest.fixture
def make_page():
    return FakePage


@pytest.fixture
def make_browser():
    return FakeBrowser
