"""
Auth-wall detector.

Classifies a fetched page as authenticated, redirected to a login/challenge
page, or ambiguous (a sign-in page served at the job URL).
"""

import re
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

LOGIN_PATH_PATTERN = re.compile(r'/(login|authwall|checkpoint/challenge)', re.IGNORECASE)
SIGN_IN_TITLE_PATTERN = re.compile(r'log\s*in|sign\s*in', re.IGNORECASE)
ROLE_TITLE_PATTERN = re.compile(
    r'job|engineer|developer|analyst|manager|director|coordinator',
    re.IGNORECASE
)


class AuthState(str, Enum):
    AUTHENTICATED = "authenticated"
    LOGIN_REDIRECT = "login_redirect"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class AuthVerdict:
    state: AuthState
    reason: str = ""

    @property
    def auth_required(self) -> bool:
        return self.state != AuthState.AUTHENTICATED


def is_login_url(url: Optional[str]) -> bool:
    """True if the URL points at a login, authwall or challenge page."""
    return bool(url and LOGIN_PATH_PATTERN.search(url))


def is_sign_in_title(title: Optional[str]) -> bool:
    """True for sign-in phrasing that does not also look like a job title."""
    if not title:
        return False
    return bool(SIGN_IN_TITLE_PATTERN.search(title)) and not ROLE_TITLE_PATTERN.search(title)


class AuthWallDetector:
    """Detects login walls from the resolved URL and the page title."""

    def inspect(self, resolved_url: str, html: Optional[str] = None,
                soup: Optional[BeautifulSoup] = None) -> AuthVerdict:
        """
        Classify a fetch result.

        Args:
            resolved_url: Final URL after redirects
            html: Page body (optional when soup is given)
            soup: Pre-parsed page (optional)

        Returns:
            AuthVerdict; either signal alone means auth is required
        """
        if is_login_url(resolved_url):
            logger.info(f"[auth_wall] Login redirect detected: {resolved_url}")
            return AuthVerdict(AuthState.LOGIN_REDIRECT, f"redirected to {resolved_url}")

        if soup is None and html:
            soup = BeautifulSoup(html, 'lxml')

        title = ""
        if soup is not None and soup.title:
            title = soup.title.get_text().strip()

        if is_sign_in_title(title):
            logger.info(f"[auth_wall] Sign-in page title detected: {title!r}")
            return AuthVerdict(AuthState.AMBIGUOUS, f"sign-in page title {title!r}")

        return AuthVerdict(AuthState.AUTHENTICATED)
