"""Provides utilities for locating per-user pyons files.

The only file pyons reads on its own is the credential file at
`~/ons/credential`; this module resolves where that file lives on the
current platform.
"""
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CREDENTIAL_DIR_NAME = "ons"
CREDENTIAL_FILE_NAME = "credential"


def home_directory() -> Optional[Path]:
    """Returns the home directory of the current user.

    Returns:
        Optional[Path]: The home directory, or None if it cannot be
        determined (for example a service account without `HOME` and no
        password database entry).
    """
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        logger.debug(f"Could not determine home directory: {e}")
        return None
    if str(home) in ("", "~"):
        return None
    return home


def default_credential_path() -> Optional[Path]:
    """Returns the platform-specific path of the default credential file.

    Returns:
        Optional[Path]: `<home>/ons/credential`, or None when there is no
        home directory.
    """
    home = home_directory()
    if home is None:
        return None
    return home / CREDENTIAL_DIR_NAME / CREDENTIAL_FILE_NAME
