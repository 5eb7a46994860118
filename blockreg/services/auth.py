"""
Registry credentials.

The credentials file is a JSON document with an ``access_token``; its path
comes from the ``BLOCKREG_CREDENTIALS`` environment variable. Nothing is read
until a caller asks, and only ``get_token`` raises when credentials are
missing.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from ..core.exceptions import AuthenticationError

CREDENTIALS_ENV_VAR = "BLOCKREG_CREDENTIALS"


class Authentication:
    """Bearer token provider backed by an environment-pointed credentials file."""

    def __init__(self, env_var: str = CREDENTIALS_ENV_VAR) -> None:
        self._env_var = env_var
        self._credentials: dict | None = None

    def _load(self) -> dict:
        if self._credentials is not None:
            return self._credentials

        path_str = os.environ.get(self._env_var)
        if not path_str:
            raise AuthenticationError(f"{self._env_var} environment variable not found")

        path = Path(path_str)
        if not path.is_file():
            raise AuthenticationError(
                f"Credentials file not found: {path}", context={"file_path": str(path)}
            )

        try:
            credentials = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AuthenticationError(
                f"Failed to read credentials file: {path}", cause=e
            ) from e

        if not isinstance(credentials, dict) or not credentials.get("access_token"):
            raise AuthenticationError(f"Credentials file has no access_token: {path}")

        self._credentials = credentials
        return credentials

    def has_credentials(self) -> bool:
        """True if a usable token can be read. Never raises."""
        try:
            self._load()
            return True
        except AuthenticationError:
            return False

    def get_token(self) -> str:
        """
        The bearer token.

        Raises:
            AuthenticationError: If credentials are missing or unreadable
        """
        return self._load()["access_token"]
