"""Credential resolution for the AWS Translate backend."""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import CredentialsUnavailable
from .signer import Credentials

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"


def default_credentials_file() -> Path:
    """Shared credentials file, honouring AWS_SHARED_CREDENTIALS_FILE."""
    override = os.environ.get("AWS_SHARED_CREDENTIALS_FILE")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".aws" / "credentials"


def load_profile(path: Path, profile: str) -> Optional[Credentials]:
    """
    Read one profile section from a credentials file.

    Returns:
        Credentials if the section has both keys, None otherwise
    """
    if not path.is_file():
        logger.debug(f"Credentials file not found: {path}")
        return None

    parser = configparser.ConfigParser()
    try:
        parser.read(path, encoding="utf-8")
    except configparser.Error as e:
        logger.warning(f"Failed to read credentials file {path}: {e}")
        return None

    if not parser.has_section(profile):
        logger.debug(f"Profile '{profile}' not found in {path}")
        return None

    section = parser[profile]
    access_key = section.get("aws_access_key_id", "").strip()
    secret_key = section.get("aws_secret_access_key", "").strip()
    token = section.get("aws_session_token", "").strip() or None

    if access_key and secret_key:
        return Credentials(access_key, secret_key, token)
    return None


def resolve_credentials(
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
    session_token: Optional[str] = None,
    profile: Optional[str] = None,
    credentials_file: Optional[Path] = None,
) -> Credentials:
    """
    Resolve credentials from explicit values, then a profile file.

    Raises:
        CredentialsUnavailable: if no source yields both keys
    """
    if access_key and secret_key:
        logger.debug("Using explicit AWS credentials")
        return Credentials(access_key, secret_key, session_token or None)

    profile = profile or DEFAULT_PROFILE
    path = credentials_file or default_credentials_file()
    creds = load_profile(path, profile)
    if creds:
        logger.debug(f"Using AWS credentials from profile '{profile}'")
        return creds

    raise CredentialsUnavailable(
        "AWS credentials not configured. Set AWS_ACCESS_KEY_ID and "
        f"AWS_SECRET_ACCESS_KEY, or add profile '{profile}' to {path}",
        details={"profile": profile, "credentials_file": str(path)},
    )
