"""
Dashboard Report Package
Logs into a web dashboard with a headless browser and captures the page
as a PDF and a PNG screenshot.

CLI Usage:
    python -m dashreport <url> [options]

    Options:
        --auth-mode     none | basic | searchguard | xpack | custom
        --username      Login user (or DASHREPORT_USERNAME)
        --password      Login password (or DASHREPORT_PASSWORD)
        --pdf           PDF output path
        --screenshot    PNG output path
        --width/--height  Screenshot viewport size
        --landscape     Render the PDF in landscape
"""

from .errors import (
    AuthenticationError,
    CaptureError,
    ConfigError,
    LaunchError,
    NavigationError,
    ReportError,
    ReporterStateError,
    TeardownError,
)
from .auth import AuthDescriptor, AuthFactory, AuthMode, LoginSelectors
from .run_config import FileTargets, ImageTarget, PdfTarget, ReportRunConfig
from .reporter import Reporter, ReporterState, ReportResult, run, run_report

__all__ = [
    'Reporter',
    'ReporterState',
    'ReportResult',
    'run',
    'run_report',
    # Config
    'ReportRunConfig',
    'FileTargets',
    'PdfTarget',
    'ImageTarget',
    # Auth
    'AuthDescriptor',
    'AuthFactory',
    'AuthMode',
    'LoginSelectors',
    # Errors
    'ReportError',
    'ConfigError',
    'LaunchError',
    'NavigationError',
    'AuthenticationError',
    'CaptureError',
    'TeardownError',
    'ReporterStateError',
]

__version__ = '1.0.0'
