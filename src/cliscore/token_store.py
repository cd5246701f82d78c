"""Keeps the keyscore API key in the OS keychain when a backend is usable.

Without a working keyring backend every call degrades quietly: nothing is
loaded and nothing is stored, and the key stays in the config file instead.
"""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)

_SERVICE_NAME = "cliscore"
_API_KEY_ENTRY = "api_key"
_AVAILABLE = False

try:
    import keyring

    # One-file builds cannot discover keyring backends through entry points.
    if getattr(sys, "frozen", False):
        if sys.platform == "darwin":
            from keyring.backends import macOS

            keyring.set_keyring(macOS.Keyring())
        elif sys.platform == "win32":
            from keyring.backends import Windows

            keyring.set_keyring(Windows.WinVaultKeyring())

    _AVAILABLE = True
except Exception:
    logger.debug("keyring not available; API key stays in the config file")


def is_available() -> bool:
    return _AVAILABLE


def load_api_key() -> str | None:
    """Return the stored API key, or None if there is none or the keychain fails."""
    if not _AVAILABLE:
        return None
    try:
        return keyring.get_password(_SERVICE_NAME, _API_KEY_ENTRY)
    except Exception as exc:
        logger.debug("Could not read API key from keyring: %s", exc)
        return None


def save_api_key(api_key: str) -> bool:
    """Store *api_key*; False tells the caller to keep it in the config file."""
    if not _AVAILABLE or not api_key:
        return False
    try:
        keyring.set_password(_SERVICE_NAME, _API_KEY_ENTRY, api_key)
    except Exception as exc:
        logger.warning("Failed to save API key to keyring: %s", exc)
        return False
    return True
