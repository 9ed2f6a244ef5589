"""Shared CLI prompt utilities."""

import getpass
import os
from typing import Optional

MASTER_PASSWORD_ENV = "VAULT_MASTER_PASSWORD"


def prompt_master_password(prompt_text: str = "Vault master password: ") -> Optional[str]:
    """Get the file vault master password.

    Reads VAULT_MASTER_PASSWORD first so unattended runs never block on input.

    Returns:
        Password, or None if nothing was entered
    """
    password = os.environ.get(MASTER_PASSWORD_ENV)
    if password:
        return password

    try:
        password = getpass.getpass(prompt_text)
    except EOFError:
        return None
    return password or None


def mask_password(password: str, show_chars: int = 4) -> str:
    """Create a masked version of password showing only first/last chars.

    Args:
        password: Password to mask
        show_chars: Number of characters to show at start and end

    Returns:
        Masked password string like "Ab12****xy9!"
    """
    if len(password) <= show_chars * 2:
        return "*" * len(password)

    return password[:show_chars] + "*" * (len(password) - show_chars * 2) + password[-show_chars:]
