"""
Form Login
==========
Playwright-driven username/password form login.

Two flavours:
    - ``kibana()``  fixed selectors for Kibana behind Search Guard or X-Pack
    - ``custom()``  caller-supplied selectors

Both type the username, then the password, pacing every keystroke at
``load_delay_ms / 50`` ms so anti-automation hooks see human-like input,
and only then click the login button.  Each step is a single attempt:
a missing selector or a navigation timeout raises ``AuthenticationError``.

Security:
    - Credentials are never logged.
    - Error messages name the user, never the password.
"""

from __future__ import annotations

import asyncio
import logging

from playwright.async_api import Page

from ..errors import AuthenticationError
from .base_auth import AuthDescriptor, AuthMode, BaseAuthHandler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Kibana selectors
# ---------------------------------------------------------------------------

KIBANA_USER_SELECTOR = "#username"
KIBANA_PASSWORD_SELECTOR = "#password"
XPACK_LOGIN_SELECTOR = ".kuiButton"
SEARCH_GUARD_LOGIN_SELECTOR = ".btn-login"
KIBANA_NAV_CLOSE_SELECTOR = ".global-nav-link--close"

XPACK_APP = "xpack"
SEARCH_GUARD_APP = "searchguard"


def _typing_delay(load_delay_ms: int) -> float:
    """Per-keystroke delay in ms."""
    return load_delay_ms / 50


def kibana_login_selector(app_name: str) -> str:
    """X-Pack uses its own button; anything else falls back to Search Guard's."""
    if app_name == XPACK_APP:
        return XPACK_LOGIN_SELECTOR
    return SEARCH_GUARD_LOGIN_SELECTOR


async def kibana(
    page: Page,
    user: str,
    password: str,
    app_name: str = XPACK_APP,
    load_delay_ms: int = 5000,
) -> None:
    """Log into Kibana and dismiss the navigation overlay.

    Steps:
        1. Type user / password into ``#username`` / ``#password``
        2. Click the variant's login button
        3. Wait ``load_delay_ms`` for the dashboard to load
        4. Close the global nav overlay, wait ``load_delay_ms / 5``
    """
    variant = "X-Pack" if app_name == XPACK_APP else "Search Guard"
    delay = _typing_delay(load_delay_ms)
    logger.info(f"[AUTH] Kibana login via {variant}")

    try:
        await page.type(KIBANA_USER_SELECTOR, user, delay=delay)
        await page.type(KIBANA_PASSWORD_SELECTOR, password, delay=delay)
        await page.click(kibana_login_selector(app_name))

        await asyncio.sleep(load_delay_ms / 1000)
        await page.click(KIBANA_NAV_CLOSE_SELECTOR)
        await asyncio.sleep(load_delay_ms / 5 / 1000)
    except Exception as err:
        raise AuthenticationError(
            f"fail to authenticate via {variant}, user: {user}, {err}",
            user=user,
        ) from err

    logger.info(f"[AUTH] Kibana login submitted ({variant})")


async def custom(
    page: Page,
    user: str,
    password: str,
    user_selector: str,
    pass_selector: str,
    login_btn_selector: str,
    load_delay_ms: int = 5000,
) -> None:
    """Fill a login form located by the given selectors and submit it."""
    delay = _typing_delay(load_delay_ms)
    logger.info(
        f"[AUTH] Custom form login ({user_selector}, {pass_selector}, "
        f"{login_btn_selector})"
    )

    try:
        await page.type(user_selector, user, delay=delay)
        await page.type(pass_selector, password, delay=delay)
        await page.click(login_btn_selector)
        await asyncio.sleep(load_delay_ms / 1000)
    except Exception as err:
        raise AuthenticationError(
            f"fail to authenticate via custom auth, user: {user}, {err}",
            user=user,
        ) from err

    logger.info("[AUTH] Custom form login submitted")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

class SearchGuardAuthHandler(BaseAuthHandler):
    """Kibana behind Search Guard."""

    @property
    def mode(self) -> AuthMode:
        return AuthMode.SEARCH_GUARD

    async def login(self, page, auth: AuthDescriptor, *, load_delay_ms=5000,
                    encoding="base64"):
        await kibana(page, auth.user, auth.password, SEARCH_GUARD_APP,
                     load_delay_ms=load_delay_ms)
        return page


class XPackAuthHandler(BaseAuthHandler):
    """Kibana behind Elastic X-Pack security."""

    @property
    def mode(self) -> AuthMode:
        return AuthMode.XPACK

    async def login(self, page, auth: AuthDescriptor, *, load_delay_ms=5000,
                    encoding="base64"):
        await kibana(page, auth.user, auth.password, XPACK_APP,
                     load_delay_ms=load_delay_ms)
        return page


class CustomFormAuthHandler(BaseAuthHandler):

    @property
    def mode(self) -> AuthMode:
        return AuthMode.CUSTOM

    async def login(self, page, auth: AuthDescriptor, *, load_delay_ms=5000,
                    encoding="base64"):
        sel = auth.selectors
        await custom(
            page,
            auth.user,
            auth.password,
            sel.user,
            sel.password,
            sel.submit,
            load_delay_ms=load_delay_ms,
        )
        return page
