"""Browser service package.

Connects to or launches Chromium via Playwright and keeps one inspection
session per page.
"""

from __future__ import annotations

from .core import BrowserServiceCore
from .driver import PageDriver
from .pages import BrowserPagesMixin

__all__ = ["BrowserService", "PageDriver"]


class BrowserService(BrowserServiceCore, BrowserPagesMixin):
    """Complete browser service.

    Composed from:
    - BrowserServiceCore: Connection, page tracking, shutdown
    - BrowserPagesMixin: Page listing, selection and navigation
    """

    pass
