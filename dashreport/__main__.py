#!/usr/bin/env python3
"""
Command-line entry point
========================
Builds a ``ReportRunConfig`` from flags (credentials may also come from the
environment or a ``.env`` file) and runs one report.

Run with: python -m dashreport https://dashboard.example.com --auth-mode xpack
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError, ReportError
from .reporter import ReportResult, run
from .run_config import _DEFAULTS, ReportRunConfig

logger = logging.getLogger(__name__)


def _load_env() -> None:
    """Load ``.env`` from the project root, else from the CWD."""
    env_path = Path(__file__).resolve().parent.parent / '.env'
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S',
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dashreport',
        description='Log into a dashboard with headless Chromium and save a PDF + PNG of the page',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m dashreport https://example.com
  python -m dashreport https://kibana.local --auth-mode xpack --username elastic
  python -m dashreport https://demo.local/ --auth-mode custom \\
      --user-selector '#user' --pass-selector '#pass' --submit-selector '.btn-lg'
  python -m dashreport https://example.com --pdf out/doc.pdf --landscape --no-screenshot
        """,
    )

    parser.add_argument('url', help='Page to capture')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    # ── Authentication flags ──────────────────────────────────────
    auth_group = parser.add_argument_group(
        'Authentication',
        'Credentials are resolved from flags, then DASHREPORT_USERNAME / '
        'DASHREPORT_PASSWORD (a .env file is loaded), then --prompt.')
    auth_group.add_argument(
        '--auth-mode', default='none',
        choices=['none', 'basic', 'searchguard', 'xpack', 'custom'],
        help='Login strategy (default: none)',
    )
    auth_group.add_argument('--username', type=str, help='Login user')
    auth_group.add_argument('--password', type=str, help='Login password')
    auth_group.add_argument(
        '--prompt', action='store_true',
        help='Prompt in the terminal for missing credentials',
    )
    auth_group.add_argument('--user-selector', type=str, help="Custom mode user field (default: #user)")
    auth_group.add_argument('--pass-selector', type=str, help="Custom mode password field (default: #pass)")
    auth_group.add_argument('--submit-selector', type=str, help="Custom mode login button (default: .btn-lg)")
    auth_group.add_argument(
        '--encoding', default=_DEFAULTS['basic_encoding'],
        choices=['base64', 'base64url', 'hex'],
        help='Basic auth credential encoding (default: base64)',
    )

    # ── Output flags ──────────────────────────────────────────────
    out_group = parser.add_argument_group('Output')
    out_group.add_argument('--output-dir', type=str, help='Directory for default output names')
    out_group.add_argument('--pdf', type=str, metavar='PATH', help='PDF output path')
    out_group.add_argument('--screenshot', type=str, metavar='PATH', help='PNG output path')
    out_group.add_argument('--no-pdf', action='store_true', help='Skip the PDF')
    out_group.add_argument('--no-screenshot', action='store_true', help='Skip the screenshot')
    out_group.add_argument(
        '--pdf-format', default=_DEFAULTS['pdf_format'],
        help='PDF paper format, e.g. A4, Letter (default: A4)',
    )
    out_group.add_argument('--landscape', action='store_true', help='Landscape PDF')
    out_group.add_argument('--print-background', action='store_true', help='Include CSS backgrounds in the PDF')
    out_group.add_argument('--width', type=int, default=_DEFAULTS['img_width'], help='Screenshot width (default: 1280)')
    out_group.add_argument('--height', type=int, default=_DEFAULTS['img_height'], help='Screenshot height (default: 900)')
    out_group.add_argument('--full-page', action='store_true', help='Capture the full scrollable page')

    # ── Browser / timing flags ────────────────────────────────────
    browser_group = parser.add_argument_group('Browser')
    browser_group.add_argument(
        '--load-delay-ms', type=int, default=_DEFAULTS['load_delay_ms'],
        help='Wait after login submit, ms; typing pace is 1/50th (default: 5000)',
    )
    browser_group.add_argument(
        '--timeout', type=int, default=_DEFAULTS['navigation_timeout_ms'] // 1000,
        help='Navigation timeout in seconds (default: 30)',
    )
    browser_group.add_argument(
        '--wait-until', default=_DEFAULTS['wait_until'],
        choices=['load', 'domcontentloaded', 'networkidle', 'commit'],
        help='Navigation completion signal (default: networkidle)',
    )
    browser_group.add_argument(
        '--headed', action='store_true',
        help='Show the browser window (PDF rendering needs headless; combine with --no-pdf)',
    )
    browser_group.add_argument('--strict-https', action='store_true', help='Fail on HTTPS certificate errors')

    return parser


def print_summary(result: ReportResult) -> None:
    print("\n" + "=" * 60)
    print("REPORT COMPLETE")
    print("=" * 60)
    print(f"  URL:         {result.url}")
    for path in result.artifacts:
        print(f"  Exported:    {path}")
    if not result.artifacts:
        print("  Exported:    nothing (all targets inactive)")
    print(f"  Total time:  {result.elapsed_s:.1f}s")
    print("=" * 60)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _load_env()
    _configure_logging(args.verbose)

    try:
        cfg = ReportRunConfig.from_cli_args(args).validate()
    except ConfigError as err:
        parser.error(str(err))

    cfg.log_summary()

    try:
        result = run(cfg)
    except ReportError as err:
        logger.error(f"[REPORT] {err.operation} failed: {err}", exc_info=args.verbose)
        return 1

    print_summary(result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
