"""
Base Authentication Handler (Abstract)
======================================
Defines the contract every login strategy implements, plus the
authentication descriptor the Reporter hands to it.

To add a new strategy:
    1. Add a member to ``AuthMode``
    2. Create a handler inheriting from ``BaseAuthHandler``
    3. Register it in ``auth_factory.py`` via ``AuthFactory.register()``
    4. No changes to the Reporter are needed.

Design principles:
    - The Reporter never imports strategy code directly
    - Exactly one ``AuthMode`` is selected per run
    - Handlers wrap every failure in ``AuthenticationError``
    - Credentials are never logged (the user name may appear in errors)
"""

from __future__ import annotations

import getpass
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from playwright.async_api import Page

from ..errors import ConfigError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Auth mode (tagged choice)
# ---------------------------------------------------------------------------

class AuthMode(str, Enum):
    """Which login strategy to run.  Exactly one per descriptor."""
    BASIC = "basic"
    SEARCH_GUARD = "searchguard"
    XPACK = "xpack"
    CUSTOM = "custom"


@dataclass
class LoginSelectors:
    """CSS selectors for the ``custom`` form login."""
    user: str = "#user"
    password: str = "#pass"
    submit: str = ".btn-lg"


# Env-var prefixes checked for credentials, in order
_ENV_VAR_PREFIXES: List[str] = ["DASHREPORT"]


# ---------------------------------------------------------------------------
# Authentication descriptor
# ---------------------------------------------------------------------------

@dataclass
class AuthDescriptor:
    """Credentials plus the selected strategy for one run."""
    user: str = ""
    password: str = ""
    mode: AuthMode = AuthMode.CUSTOM
    selectors: LoginSelectors = field(default_factory=LoginSelectors)

    def __post_init__(self):
        if not isinstance(self.mode, AuthMode):
            try:
                self.mode = AuthMode(str(self.mode).lower())
            except ValueError:
                raise ConfigError(
                    f"Unknown auth mode: {self.mode!r} "
                    f"(expected one of {[m.value for m in AuthMode]})"
                ) from None

    @property
    def is_complete(self) -> bool:
        return bool(self.user and self.password)

    @classmethod
    def from_flags(
        cls,
        user: str,
        password: str,
        *,
        basic: bool = False,
        search_guard: bool = False,
        xpack: bool = False,
        custom: bool = False,
        selectors: Optional[LoginSelectors] = None,
    ) -> Optional["AuthDescriptor"]:
        """Build a descriptor from the boolean-flag shape.

        Returns None when no flag is set (no authentication).  More than one
        flag used to run several strategies back to back (searchGuard, then
        xpack, then custom), submitting credentials twice; that combination
        is now rejected with ``ConfigError``.
        """
        flags = [
            (AuthMode.BASIC, basic),
            (AuthMode.SEARCH_GUARD, search_guard),
            (AuthMode.XPACK, xpack),
            (AuthMode.CUSTOM, custom),
        ]
        selected = [mode for mode, on in flags if on]
        if not selected:
            return None
        if len(selected) > 1:
            raise ConfigError(
                "Only one auth mode may be enabled, got: "
                + ", ".join(m.value for m in selected),
                user=user,
            )
        return cls(
            user=user,
            password=password,
            mode=selected[0],
            selectors=selectors or LoginSelectors(),
        )

    def resolve_credentials(self, *, interactive: bool = False) -> "AuthDescriptor":
        """Fill missing credentials from env vars, then an optional prompt.

        Resolution order:
            1. Values already set on the descriptor
            2. ``DASHREPORT_USERNAME`` / ``DASHREPORT_PASSWORD``
            3. Terminal prompt (only if *interactive*)
        """
        if self.is_complete:
            return self

        for prefix in _ENV_VAR_PREFIXES:
            if not self.user:
                self.user = os.environ.get(f"{prefix}_USERNAME", "")
            if not self.password:
                self.password = os.environ.get(f"{prefix}_PASSWORD", "")

        if self.is_complete:
            logger.info("[AUTH] Credentials resolved from environment")
            return self

        if interactive:
            if not self.user:
                self.user = input("  Dashboard username: ").strip()
            if not self.password:
                self.password = getpass.getpass("  Dashboard password: ")

        return self


# ---------------------------------------------------------------------------
# Abstract Base Handler
# ---------------------------------------------------------------------------

class BaseAuthHandler(ABC):
    """Abstract base for all login strategies.

    Subclasses MUST implement:
        - ``mode``                 : the ``AuthMode`` this handler serves
        - ``login(page, auth, ...)``: perform the strategy on *page*

    ``before_navigation`` tells the Reporter whether the strategy must run
    before ``page.goto()`` (header injection) or after it (form login).
    """

    before_navigation: bool = False

    @property
    @abstractmethod
    def mode(self) -> AuthMode:
        ...

    @abstractmethod
    async def login(
        self,
        page: Page,
        auth: AuthDescriptor,
        *,
        load_delay_ms: int = 5000,
        encoding: str = "base64",
    ) -> Page:
        """Run the strategy and return the (possibly same) page.

        Raises:
            AuthenticationError: on any failed step.
        """
        ...
