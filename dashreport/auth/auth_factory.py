"""
Authentication Factory
======================
Maps each ``AuthMode`` to the handler that implements it.

Adding a strategy:
    1. Add the mode to ``AuthMode``
    2. Create a handler class inheriting from ``BaseAuthHandler``
    3. Call ``AuthFactory.register(handler_class)``

``AuthFactory.missing_modes()`` lists modes with no handler; the test
suite asserts it is empty so a new mode cannot ship half-wired.

Usage::

    from dashreport.auth.auth_factory import AuthFactory

    handler = AuthFactory.get_handler(auth.mode)
    page = await handler.login(page, auth, load_delay_ms=5000)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Type, Union

from ..errors import ConfigError
from .base_auth import AuthMode, BaseAuthHandler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Handler Registry
# ---------------------------------------------------------------------------

# Global registry: maps auth mode → handler class
_HANDLER_REGISTRY: Dict[AuthMode, Type[BaseAuthHandler]] = {}


class AuthFactory:
    """Registry of login strategies, keyed by ``AuthMode``."""

    @staticmethod
    def register(handler_class: Type[BaseAuthHandler]) -> None:
        """Register a handler class in the global registry."""
        # Instantiate once to read its mode
        mode = handler_class().mode
        _HANDLER_REGISTRY[mode] = handler_class
        logger.debug(f"[AUTH-FACTORY] Registered handler: {mode.value}")

    @staticmethod
    def get_handler(mode: Union[AuthMode, str]) -> BaseAuthHandler:
        """Return a fresh handler for *mode*.

        Raises:
            ConfigError: if the mode is unknown or has no handler.
        """
        try:
            mode = AuthMode(mode)
        except ValueError:
            raise ConfigError(f"Unknown auth mode: {mode!r}") from None

        handler_class = _HANDLER_REGISTRY.get(mode)
        if handler_class is None:
            raise ConfigError(f"No auth handler registered for mode: {mode.value}")
        return handler_class()

    @staticmethod
    def missing_modes() -> List[AuthMode]:
        return [mode for mode in AuthMode if mode not in _HANDLER_REGISTRY]


# ---------------------------------------------------------------------------
# Auto-register built-in handlers on import
# ---------------------------------------------------------------------------

def _auto_register() -> None:
    from .basic_auth import BasicAuthHandler
    from .form_login import (
        CustomFormAuthHandler,
        SearchGuardAuthHandler,
        XPackAuthHandler,
    )

    for handler_class in (
        BasicAuthHandler,
        SearchGuardAuthHandler,
        XPackAuthHandler,
        CustomFormAuthHandler,
    ):
        AuthFactory.register(handler_class)


_auto_register()
