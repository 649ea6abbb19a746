"""
Unified Run Configuration
=========================
Single source of truth for ALL report defaults and runtime limits.

The CLI populates it from flags; code builds it directly.  The Reporter
and the auth strategies read their delays, timeouts and output targets
from here, so no magic numbers live anywhere else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

from .auth.base_auth import AuthDescriptor, AuthMode, LoginSelectors
from .errors import ConfigError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults: the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "load_delay_ms": 5000,            # post-login settle time; typing pace is 1/50th
    "navigation_timeout_ms": 30_000,
    "wait_until": "networkidle",
    "headless": True,
    "ignore_https_errors": True,
    "basic_encoding": "base64",
    "pdf_format": "A4",
    "pdf_landscape": False,
    "img_width": 1280,
    "img_height": 900,
}

_WAIT_UNTIL_CHOICES = ("load", "domcontentloaded", "networkidle", "commit")


def base_name_from_url(url: str) -> str:
    """Derive a filesystem-safe base name from a URL."""
    parsed = urlparse(url)
    base = parsed.netloc.replace('.', '_').replace(':', '_') or "report"
    if parsed.path and parsed.path != '/':
        path_part = parsed.path.strip('/').replace('/', '_')[:30]
        base = f"{base}_{path_part}"
    return base


# ---------------------------------------------------------------------------
# Output targets
# ---------------------------------------------------------------------------

@dataclass
class PdfTarget:
    """Where and how to render the PDF.  ``active=False`` skips it in a run."""
    path: Union[str, Path] = "report.pdf"
    active: bool = True
    format: str = _DEFAULTS["pdf_format"]
    landscape: bool = _DEFAULTS["pdf_landscape"]
    print_background: bool = False

    def to_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``page.pdf()``."""
        return {
            "path": str(self.path),
            "format": self.format,
            "landscape": self.landscape,
            "print_background": self.print_background,
        }


@dataclass
class ImageTarget:
    """Where to write the PNG and at what viewport size."""
    path: Union[str, Path] = "screenshot.png"
    active: bool = True
    width: int = _DEFAULTS["img_width"]
    height: int = _DEFAULTS["img_height"]
    full_page: bool = False


@dataclass
class FileTargets:
    pdf: PdfTarget = field(default_factory=PdfTarget)
    img: ImageTarget = field(default_factory=ImageTarget)


# ---------------------------------------------------------------------------
# Run config
# ---------------------------------------------------------------------------

@dataclass
class ReportRunConfig:
    """
    Configuration consumed by the Reporter and the driver.

    Populate via:
      - ``ReportRunConfig(url=...)``             → all defaults
      - ``ReportRunConfig(url=..., auth=...)``   → with a login strategy
      - ``ReportRunConfig.from_cli_args(ns)``    → from argparse Namespace
    """

    url: str = ""
    auth: Optional[AuthDescriptor] = None
    targets: FileTargets = field(default_factory=FileTargets)

    # ---- Timing ----
    load_delay_ms: int = _DEFAULTS["load_delay_ms"]
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]
    wait_until: str = _DEFAULTS["wait_until"]

    # ---- Browser ----
    headless: bool = _DEFAULTS["headless"]
    ignore_https_errors: bool = _DEFAULTS["ignore_https_errors"]

    # ---- Basic auth ----
    basic_encoding: str = _DEFAULTS["basic_encoding"]

    # -----------------------------------------------------------------------
    # Validation
    # -----------------------------------------------------------------------
    def validate(self) -> "ReportRunConfig":
        """Reject configs the Reporter cannot run.

        Raises:
            ConfigError: with the first problem found.
        """
        parsed = urlparse(self.url or "")
        if parsed.scheme not in ("http", "https", "file") or not (parsed.netloc or parsed.path):
            raise ConfigError(f"Invalid URL: {self.url!r}", url=self.url)
        if self.wait_until not in _WAIT_UNTIL_CHOICES:
            raise ConfigError(
                f"wait_until must be one of {_WAIT_UNTIL_CHOICES}, got {self.wait_until!r}",
                url=self.url,
            )
        if self.load_delay_ms < 0 or self.navigation_timeout_ms < 0:
            raise ConfigError("Delays and timeouts must be >= 0", url=self.url)

        img = self.targets.img
        if img.active and (img.width <= 0 or img.height <= 0):
            raise ConfigError(
                f"Screenshot size must be positive, got {img.width}x{img.height}",
                url=self.url,
            )

        # page.pdf() only works in headless Chromium
        if not self.headless and self.targets.pdf.active:
            raise ConfigError(
                "PDF rendering requires headless mode (drop --headed or add --no-pdf)",
                url=self.url,
            )

        if self.auth is not None and not self.auth.is_complete:
            raise ConfigError(
                f"Credentials incomplete for auth mode '{self.auth.mode.value}' "
                f"(set DASHREPORT_USERNAME / DASHREPORT_PASSWORD or pass --username / --password)",
                url=self.url,
                user=self.auth.user or None,
            )
        return self

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_cli_args(cls, args) -> "ReportRunConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        url = args.url
        if url and not url.startswith(('http://', 'https://', 'file://')):
            url = 'https://' + url

        base_name = base_name_from_url(url or "")
        out_dir = Path(getattr(args, "output_dir", None) or ".")

        targets = FileTargets(
            pdf=PdfTarget(
                path=getattr(args, "pdf", None) or out_dir / f"{base_name}.pdf",
                active=not getattr(args, "no_pdf", False),
                format=getattr(args, "pdf_format", _DEFAULTS["pdf_format"]),
                landscape=getattr(args, "landscape", _DEFAULTS["pdf_landscape"]),
                print_background=getattr(args, "print_background", False),
            ),
            img=ImageTarget(
                path=getattr(args, "screenshot", None) or out_dir / f"{base_name}.png",
                active=not getattr(args, "no_screenshot", False),
                width=getattr(args, "width", _DEFAULTS["img_width"]),
                height=getattr(args, "height", _DEFAULTS["img_height"]),
                full_page=getattr(args, "full_page", False),
            ),
        )

        auth = None
        auth_mode = getattr(args, "auth_mode", "none") or "none"
        if auth_mode != "none":
            auth = AuthDescriptor(
                user=getattr(args, "username", None) or "",
                password=getattr(args, "password", None) or "",
                mode=AuthMode(auth_mode),
                selectors=LoginSelectors(
                    user=getattr(args, "user_selector", None) or LoginSelectors.user,
                    password=getattr(args, "pass_selector", None) or LoginSelectors.password,
                    submit=getattr(args, "submit_selector", None) or LoginSelectors.submit,
                ),
            )
            auth.resolve_credentials(interactive=getattr(args, "prompt", False))

        return cls(
            url=url or "",
            auth=auth,
            targets=targets,
            load_delay_ms=getattr(args, "load_delay_ms", _DEFAULTS["load_delay_ms"]),
            navigation_timeout_ms=getattr(
                args, "timeout", _DEFAULTS["navigation_timeout_ms"] // 1000
            ) * 1000,
            wait_until=getattr(args, "wait_until", _DEFAULTS["wait_until"]),
            headless=not getattr(args, "headed", False),
            ignore_https_errors=not getattr(args, "strict_https", False),
            basic_encoding=getattr(args, "encoding", _DEFAULTS["basic_encoding"]),
        )

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self) -> None:
        """Emit a structured summary to the logger."""
        pdf, img = self.targets.pdf, self.targets.img
        logger.info("=" * 60)
        logger.info("REPORT RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {self.url}")
        if self.auth:
            logger.info(f"  Auth:             {self.auth.mode.value} (user: {self.auth.user})")
        else:
            logger.info("  Auth:             none")
        logger.info(f"  Wait Until:       {self.wait_until} (timeout {self.navigation_timeout_ms} ms)")
        logger.info(f"  Load Delay:       {self.load_delay_ms} ms")
        logger.info(f"  Headless:         {self.headless}")
        if pdf.active:
            orientation = "landscape" if pdf.landscape else "portrait"
            logger.info(f"  PDF:              {pdf.path} ({pdf.format}, {orientation})")
        else:
            logger.info("  PDF:              skipped")
        if img.active:
            logger.info(f"  Screenshot:       {img.path} ({img.width}x{img.height})")
        else:
            logger.info("  Screenshot:       skipped")
        logger.info("=" * 60)
