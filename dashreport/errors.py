"""
Report Errors
=============
Exception hierarchy for a report run.

Every failure is caught where it happens, wrapped with the context that
matters (URL, user, operation) and re-raised.  Nothing below is retried:
any ``ReportError`` aborts the whole run.

    ReportError
    ├── ConfigError          bad / incomplete run configuration
    ├── LaunchError          headless browser could not be started
    ├── NavigationError      URL unreachable or network never went idle
    ├── AuthenticationError  a login strategy failed (form or header)
    ├── CaptureError         screenshot or PDF rendering failed
    ├── TeardownError        browser close failed (resources may leak)
    └── ReporterStateError   a Reporter method was called out of order
"""

from __future__ import annotations

from typing import Optional


class ReportError(Exception):
    """Base class for every error that aborts a report run."""

    operation = "report"

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        user: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.url = url
        self.user = user
        if operation:
            self.operation = operation


class ConfigError(ReportError):
    operation = "config"


class LaunchError(ReportError):
    operation = "launch"


class NavigationError(ReportError):
    operation = "navigate"


class AuthenticationError(ReportError):
    operation = "authenticate"


class CaptureError(ReportError):
    operation = "capture"


class TeardownError(ReportError):
    operation = "close"


class ReporterStateError(ReportError):
    """Raised when e.g. ``pdf()`` is called before ``open_page()``."""

    operation = "state"
