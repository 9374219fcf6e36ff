"""
Yushan Client Credential Storage Implementations

Provides storage backends for credential persistence. Backends only hold
data; authentication-state bookkeeping lives in CredentialStore.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Optional

from .types import Credential


logger = logging.getLogger("yushan_client.storage")


class MemoryStorage:
    """In-memory credential storage (default, non-persistent)."""

    def __init__(self) -> None:
        self._credential = Credential()
        self._lock = threading.Lock()

    def load(self) -> Credential:
        """Return a copy of the stored credential."""
        with self._lock:
            return Credential(**self._credential.to_dict())

    def save(self, credential: Credential) -> None:
        """Store the credential."""
        with self._lock:
            self._credential = Credential(**credential.to_dict())

    def clear(self) -> None:
        """Clear the stored credential."""
        with self._lock:
            self._credential = Credential()


class FileStorage:
    """File-based credential storage (persistent across restarts)."""

    def __init__(self, file_path: Optional[str] = None) -> None:
        """
        Initialize file storage.

        Args:
            file_path: Path to credential file. Defaults to ~/.yushan/credentials.json
        """
        if file_path:
            self._file_path = Path(file_path)
        else:
            self._file_path = Path.home() / ".yushan" / "credentials.json"

        self._lock = threading.Lock()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._file_path

    def load(self) -> Credential:
        """Read the credential from file; a missing or corrupt file reads as empty."""
        with self._lock:
            try:
                if self._file_path.exists():
                    with open(self._file_path, "r", encoding="utf-8") as f:
                        return Credential.from_dict(json.load(f))
            except (json.JSONDecodeError, OSError) as e:
                logger.warning("Ignoring unreadable credential file %s: %s", self._file_path, e)
            return Credential()

    def save(self, credential: Credential) -> None:
        """Write the credential to file, owner read/write only."""
        with self._lock:
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(credential.to_dict(), f)
            os.chmod(self._file_path, 0o600)

    def clear(self) -> None:
        """Delete the credential file."""
        with self._lock:
            try:
                self._file_path.unlink()
            except FileNotFoundError:
                pass
