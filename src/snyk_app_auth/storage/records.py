"""Persistent storage for completed App installs.

Records live in a single JSON document ``{"installs": [...]}``.  Each
insert re-reads the document, appends, and rewrites it atomically via
:func:`atomic_write`, so a crash never leaves a half-written file.
"""

from __future__ import annotations

import asyncio
import json
import threading
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from pydantic import ValidationError

from ..crypto import TokenCipher
from ..errors import PersistenceError
from ..models.auth import StoredCredentialRecord
from .paths import DB_FILE, atomic_write


class CredentialStore(Protocol):
    """Anything that can take ownership of a finished credential record."""

    async def insert(self, record: StoredCredentialRecord) -> None: ...


class JsonCredentialStore:
    """File-backed :class:`CredentialStore`.

    Safe for concurrent inserts from many attempts within one process:
    writes are serialized by a lock and run in a worker thread.
    """

    COLLECTION = "installs"

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else DB_FILE
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"JsonCredentialStore({str(self.path)!r})"

    # -- writing ------------------------------------------------------------

    async def insert(self, record: StoredCredentialRecord) -> None:
        """Append *record* to the install collection.

        Raises :class:`~snyk_app_auth.errors.PersistenceError` if the
        document cannot be read or written.
        """
        # Serialize now so the store keeps its own copy of the record.
        payload = record.model_dump(mode="json")
        await asyncio.to_thread(self._append, payload)
        logger.debug(f"Install for org {record.orgId} written to {self.path}")

    def _append(self, payload: dict[str, Any]) -> None:
        with self._lock:
            try:
                document = self._read()
                document.setdefault(self.COLLECTION, []).append(payload)
                atomic_write(self.path, json.dumps(document, indent=2))
            except (OSError, AttributeError, TypeError, ValueError) as exc:
                raise PersistenceError(f"Failed to write {self.path}: {exc}") from exc

    # -- reading ------------------------------------------------------------

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {self.COLLECTION: []}
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError("install database is not a JSON object")
        return document

    def all(self) -> list[StoredCredentialRecord]:
        """Return every stored record, oldest first.

        Entries that fail validation are logged and skipped.
        """
        with self._lock:
            try:
                raw_records = self._read().get(self.COLLECTION, [])
            except (OSError, ValueError) as exc:
                raise PersistenceError(f"Failed to read {self.path}: {exc}") from exc

        records: list[StoredCredentialRecord] = []
        for raw in raw_records:
            try:
                records.append(StoredCredentialRecord.model_validate(raw))
            except ValidationError as exc:
                logger.warning(f"Skipping malformed install record: {exc}")
        return records

    def latest(self) -> StoredCredentialRecord | None:
        """Return the most recently stored record, or ``None``."""
        records = self.all()
        return records[-1] if records else None


def decrypt_record_tokens(
    record: StoredCredentialRecord, cipher: TokenCipher
) -> tuple[str, str]:
    """Return the plaintext ``(access_token, refresh_token)`` of *record*.

    Raises :class:`~snyk_app_auth.errors.DecryptionError` if *cipher* holds
    a different key or the stored values were modified.
    """
    return cipher.decrypt(record.access_token), cipher.decrypt(record.refresh_token)
