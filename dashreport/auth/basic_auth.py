"""
HTTP Basic Auth
===============
Injects an ``Authorization: Basic <token>`` header into every request the
page makes.  Must run before ``page.goto()`` so the first request already
carries it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Callable, Dict

from playwright.async_api import Page

from ..errors import AuthenticationError
from .base_auth import AuthDescriptor, AuthMode, BaseAuthHandler

logger = logging.getLogger(__name__)


_ENCODERS: Dict[str, Callable[[bytes], bytes]] = {
    "base64": base64.b64encode,
    "base64url": base64.urlsafe_b64encode,
    "hex": binascii.hexlify,
}


def encode_credentials(user: str, password: str, encoding: str = "base64") -> str:
    """Encode ``user:password`` with the named encoding."""
    try:
        encoder = _ENCODERS[encoding.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported encoding: {encoding} (expected one of {sorted(_ENCODERS)})"
        ) from None
    return encoder(f"{user}:{password}".encode("utf-8")).decode("ascii")


def basic_auth_header(user: str, password: str, encoding: str = "base64") -> Dict[str, str]:
    return {"Authorization": f"Basic {encode_credentials(user, password, encoding)}"}


async def basic(
    page: Page,
    user: str,
    password: str,
    encoding: str = "base64",
) -> Page:
    """Set the basic-auth header on *page* and return it."""
    try:
        headers = basic_auth_header(user, password, encoding)
        await page.set_extra_http_headers(headers)
    except Exception as err:
        raise AuthenticationError(
            f"fail to set basic auth headers, user: {user}, {err}",
            user=user,
        ) from err

    logger.info("[AUTH] Basic auth header set")
    return page


class BasicAuthHandler(BaseAuthHandler):

    before_navigation = True

    @property
    def mode(self) -> AuthMode:
        return AuthMode.BASIC

    async def login(self, page, auth: AuthDescriptor, *, load_delay_ms=5000,
                    encoding="base64"):
        return await basic(page, auth.user, auth.password, encoding)
