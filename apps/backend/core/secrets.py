"""
Session and credential resolution for LinkedIn enrichment.

The authenticated cookie set is owned by an external login flow (a Playwright
storage-state file written after an interactive login, or a raw li_at cookie
in the environment). This module only reads it, and relays "session invalid"
signals back to whoever owns the login flow.
"""
import os
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

SESSION_COOKIE = "li_at"
COOKIE_DOMAIN = ".linkedin.com"
DEFAULT_STORAGE_STATE = "data/auth_state.json"

SessionInvalidListener = Callable[[str], None]


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """
    Mask a secret for logging, keeping only the last few characters.

    Returns:
        Masked string, e.g. "****abcd"
    """
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * 4 + value[-visible:]


class SessionProvider:
    """Read-only view of the LinkedIn session and model credential."""

    def __init__(
        self,
        cookies: Optional[List[Dict]] = None,
        model_api_key: Optional[str] = None,
    ):
        self._cookies = list(cookies or [])
        self._model_api_key = model_api_key
        self._listeners: List[SessionInvalidListener] = []

    @classmethod
    def from_env(cls) -> "SessionProvider":
        """
        Build from environment.

        LINKEDIN_STORAGE_STATE points at a Playwright storage-state JSON file;
        LINKEDIN_LI_AT supplies a bare session cookie when no file exists.
        OPENROUTER_API_KEY is the optional model credential.
        """
        path = Path(os.getenv("LINKEDIN_STORAGE_STATE", DEFAULT_STORAGE_STATE))
        cookies: List[Dict] = []
        if path.exists():
            cookies = load_storage_state_cookies(path)
        li_at = os.getenv("LINKEDIN_LI_AT")
        if li_at and not any(c.get("name") == SESSION_COOKIE for c in cookies):
            cookies.append({
                "name": SESSION_COOKIE,
                "value": li_at,
                "domain": COOKIE_DOMAIN,
                "path": "/",
            })

        provider = cls(cookies=cookies, model_api_key=os.getenv("OPENROUTER_API_KEY"))
        logger.info(
            f"[session] Loaded {len(provider._cookies)} cookies "
            f"(li_at={mask_secret(provider._session_value()) or 'missing'}, "
            f"model_key={'set' if provider.model_api_key else 'missing'})"
        )
        return provider

    def _session_value(self) -> Optional[str]:
        for cookie in self._cookies:
            if cookie.get("name") == SESSION_COOKIE and cookie.get("value"):
                return cookie["value"]
        return None

    def has_session(self) -> bool:
        """True only when the site's main session cookie is present."""
        return self._session_value() is not None

    def get_cookies(self, domain: str = COOKIE_DOMAIN) -> List[Dict]:
        """Cookies whose domain matches (or is a parent of) the given domain."""
        bare = domain.lstrip(".")
        matched = []
        for cookie in self._cookies:
            cookie_domain = str(cookie.get("domain", "")).lstrip(".")
            if not cookie_domain:
                continue
            if (cookie_domain == bare or cookie_domain.endswith("." + bare)
                    or bare.endswith("." + cookie_domain)):
                matched.append(dict(cookie))
        return matched

    def cookie_header(self, domain: str = COOKIE_DOMAIN) -> str:
        """Cookie request header value for the given domain."""
        return "; ".join(f"{c['name']}={c['value']}" for c in self.get_cookies(domain))

    @property
    def model_api_key(self) -> Optional[str]:
        return self._model_api_key

    def on_session_invalid(self, listener: SessionInvalidListener) -> None:
        """Register a callback invoked with a reason when the session is rejected."""
        self._listeners.append(listener)

    def report_session_invalid(self, reason: str) -> None:
        """
        Signal that the site rejected the session (SessionInvalid).

        Listener errors are logged and never propagate into the pipeline.
        """
        logger.warning(f"[session] SessionInvalid: {reason}")
        for listener in self._listeners:
            try:
                listener(reason)
            except Exception as e:
                logger.error(f"[session] SessionInvalid listener failed: {e}", exc_info=True)


def load_storage_state_cookies(path: Path) -> List[Dict]:
    """
    Read cookies from a Playwright storage-state file.

    Returns:
        List of cookie dicts (name, value, domain, path, ...); empty on error
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"[session] Could not read storage state {path}: {e}")
        return []

    cookies = data.get("cookies", []) if isinstance(data, dict) else []
    return [c for c in cookies if isinstance(c, dict) and c.get("name") and "value" in c]
