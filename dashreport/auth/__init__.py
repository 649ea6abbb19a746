"""
Authentication Module
=====================
Login strategies applied to a loaded Playwright page.

Architecture:
    - ``AuthMode``         : which strategy to run (exactly one)
    - ``AuthDescriptor``   : credentials + mode + custom selectors
    - ``BaseAuthHandler``  : abstract base for every strategy
    - ``AuthFactory``      : maps ``AuthMode`` to its handler

Built-in strategies:
    - ``basic``   : ``Authorization: Basic`` header, set before navigation
    - ``kibana``  : Kibana login form (Search Guard / X-Pack variants)
    - ``custom``  : login form with caller-supplied selectors

Usage::

    from dashreport.auth import AuthDescriptor, AuthFactory, AuthMode

    auth = AuthDescriptor(user="admin", password="admin", mode=AuthMode.XPACK)
    handler = AuthFactory.get_handler(auth.mode)
    await handler.login(page, auth)
"""

from .base_auth import AuthDescriptor, AuthMode, BaseAuthHandler, LoginSelectors
from .auth_factory import AuthFactory
from .basic_auth import BasicAuthHandler, basic, basic_auth_header, encode_credentials
from .form_login import (
    CustomFormAuthHandler,
    SearchGuardAuthHandler,
    XPackAuthHandler,
    custom,
    kibana,
)

__all__ = [
    "AuthDescriptor",
    "AuthMode",
    "BaseAuthHandler",
    "LoginSelectors",
    "AuthFactory",
    # Strategies
    "basic",
    "basic_auth_header",
    "encode_credentials",
    "kibana",
    "custom",
    # Handlers
    "BasicAuthHandler",
    "SearchGuardAuthHandler",
    "XPackAuthHandler",
    "CustomFormAuthHandler",
]
