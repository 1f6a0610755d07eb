"""Credential persistence for shop credentials."""

import json
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from tiktok_proxy.core.logger import setup_logger
from tiktok_proxy.models.credentials import Credentials

logger = setup_logger(__name__)


class CredentialStore(Protocol):
    """Collaborator contract for credential persistence."""

    def load(self) -> Optional[Credentials]:
        ...

    def save(self, credentials: Credentials) -> None:
        ...


class JsonCredentialStore:
    """Stores one set of credentials in a JSON file.

    Reads the file on every ``load`` so concurrent callers never share
    in-memory credential state.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[Credentials]:
        """Load credentials from file, or None when absent or unreadable."""
        if not self.path.exists():
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            credentials = Credentials(**raw)
            logger.debug("Loaded credentials from file")
            return credentials
        except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
            logger.error(f"Failed to load credentials from {self.path}: {type(e).__name__}")
            return None

    def save(self, credentials: Credentials) -> None:
        """Write credentials to file, creating the parent directory."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(credentials.model_dump(), f, indent=2)
        logger.info(f"Credentials saved for app {credentials.app_key}")

    def clear(self) -> None:
        """Remove stored credentials (disconnect)."""
        if self.path.exists():
            self.path.unlink()
            logger.info("Stored credentials removed")
