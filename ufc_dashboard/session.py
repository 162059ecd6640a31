"""
Session state for the dashboard client.

The credential is a JWT issued by the API. Its signature is not checked here,
only the ``exp`` claim: an absent, malformed or elapsed expiry logs the
session out and purges the stored token.
"""
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from jose import JWTError, jwt

from .errors import AuthInvalid
from .logging_config import get_logger, mask_token
from .notices import NoticeBoard

logger = get_logger("session")

TOKEN_KEY = "token"

EXPIRED_MESSAGE = "Your session has expired. Please log in again."
MALFORMED_MESSAGE = "Invalid session. Please log in again."
LOGGED_OUT_MESSAGE = "Please log in to continue."


class TokenStore:
    """Durable single-key credential storage backed by a JSON file."""

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token store {self.path}: {e}")
            return None
        token = data.get(TOKEN_KEY) if isinstance(data, dict) else None
        return token or None

    def save(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({TOKEN_KEY: token}), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


def decode_expiry(token: str) -> datetime:
    """
    Read the ``exp`` claim of a JWT without verifying it.

    Raises:
        AuthInvalid: token is malformed or carries no usable expiry
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        raise AuthInvalid(MALFORMED_MESSAGE, reason="malformed") from e

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise AuthInvalid(MALFORMED_MESSAGE, reason="missing-expiry")
    return datetime.fromtimestamp(exp, tz=timezone.utc)


class Session:
    """
    Holds the current credential and its expiry.

    Written only by the login/logout flow; every consumer calls
    ``require_valid()`` right before using the token.
    """

    def __init__(
        self,
        store: Optional[TokenStore] = None,
        notices: Optional[NoticeBoard] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.notices = notices if notices is not None else NoticeBoard()
        self._clock = clock
        self._credential: Optional[str] = None
        self._expires_at: Optional[datetime] = None
        self._logout_listeners: list[Callable[[], None]] = []
        self._logged_out_notified = False

        if store is not None:
            saved = store.load()
            if saved:
                self.set_credential(saved)

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    @property
    def credential(self) -> Optional[str]:
        return self._credential

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._expires_at

    def set_credential(self, token: Optional[str]) -> bool:
        """Install a new credential. Returns False when it is unusable."""
        if not token:
            self.logout()
            return False

        try:
            expires_at = decode_expiry(token)
        except AuthInvalid as e:
            logger.warning(f"Rejecting credential {mask_token(token)}: {e.reason}")
            self.logout(e.message)
            return False

        if expires_at.timestamp() <= self._now():
            logger.info(f"Credential {mask_token(token)} expired at {expires_at.isoformat()}")
            self.logout(EXPIRED_MESSAGE)
            return False

        self._credential = token
        self._expires_at = expires_at
        self._logged_out_notified = False
        if self.store is not None:
            self.store.save(token)
        logger.info(f"Credential {mask_token(token)} valid until {expires_at.isoformat()}")
        return True

    def is_valid(self) -> bool:
        return (
            self._credential is not None
            and self._expires_at is not None
            and self._expires_at.timestamp() > self._now()
        )

    def require_valid(self) -> str:
        """
        Return the credential, or log out and raise AuthInvalid.

        Expiry is re-checked on every call since it can lapse while a view
        stays open. Each logged-out state raises a single notice: the logout
        message, or LOGGED_OUT_MESSAGE when there never was a credential.
        """
        if self._credential is None:
            if not self._logged_out_notified:
                self._logged_out_notified = True
                self.notices.warning(LOGGED_OUT_MESSAGE)
            raise AuthInvalid(LOGGED_OUT_MESSAGE, reason="absent")
        if not self.is_valid():
            self.logout(EXPIRED_MESSAGE)
            raise AuthInvalid(EXPIRED_MESSAGE, reason="expired")
        return self._credential

    def validate_on_mount(self) -> bool:
        """Gate a credential-bound view. False means the view must go to login."""
        try:
            self.require_valid()
        except AuthInvalid:
            return False
        return True

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.require_valid()}"}

    def on_logout(self, callback: Callable[[], None]) -> None:
        """Register a teardown hook for the next logout (live channels, caches)."""
        self._logout_listeners.append(callback)

    def remove_logout_hook(self, callback: Callable[[], None]) -> None:
        if callback in self._logout_listeners:
            self._logout_listeners.remove(callback)

    def logout(self, message: Optional[str] = None) -> None:
        had_credential = self._credential is not None
        self._credential = None
        self._expires_at = None
        if self.store is not None:
            self.store.clear()
        self._logged_out_notified = True

        listeners, self._logout_listeners = self._logout_listeners, []
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("Logout hook failed")

        if had_credential:
            logger.info("Session logged out")
        if message:
            self.notices.error(message)
