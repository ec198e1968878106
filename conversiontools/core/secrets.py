"""Keyring storage for the Conversion Tools API token."""

from __future__ import annotations

import keyring
from keyring.errors import PasswordDeleteError

SERVICE_NAME = "conversiontools"
ACCOUNT_NAME = "api_token"


def load_token() -> str | None:
    """Load the API token from the system keyring."""
    return keyring.get_password(SERVICE_NAME, ACCOUNT_NAME)


def save_token(api_token: str) -> None:
    """Save the API token to the system keyring."""
    keyring.set_password(SERVICE_NAME, ACCOUNT_NAME, api_token)


def delete_token() -> bool:
    """Remove the stored API token. Returns False when none was stored."""
    try:
        keyring.delete_password(SERVICE_NAME, ACCOUNT_NAME)
    except PasswordDeleteError:
        return False
    return True
