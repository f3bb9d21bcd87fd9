"""
JSON document store for provider histories.

The whole document is read once and replaced once per run. Writes are
atomic (temp file + os.replace) and guarded by an exclusive lock plus a
compare-and-swap on the ``lastUpdated`` stamp seen at load time, so two
overlapping runs cannot silently overwrite each other's merges.
"""

import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import structlog

from .models import TrackerDocument, parse_timestamp

try:
    import fcntl  # POSIX only
    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False

logger = structlog.get_logger(__name__)


class StoreError(Exception):
    """The document could not be persisted."""


class ConcurrentWriteError(StoreError):
    """Another run replaced the document since it was loaded."""


class JsonStore:
    """
    Whole-document JSON persistence.

    Usage:
        store = JsonStore("data/updates.json")
        document = store.load([("matomo", "Matomo")])
        ...
        store.save(document)
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize store.

        Args:
            path: Location of the JSON document
        """
        self.path = Path(path)
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        self._loaded_stamp: Optional[datetime] = None

    @contextmanager
    def _exclusive_lock(self) -> Iterator[None]:
        """Hold an exclusive lock on the sidecar lock file (no-op without fcntl)."""
        if not _HAS_FCNTL:
            yield
            return
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(str(self.lock_path), os.O_CREAT | os.O_RDWR)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)

    def _read(self) -> Optional[TrackerDocument]:
        """Read and parse the document; None if missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return TrackerDocument.from_dict(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning("document_unreadable", path=str(self.path), error=str(e))
            return None

    def load(self, providers: list[tuple[str, str]]) -> TrackerDocument:
        """
        Load the document, recovering with empty histories when needed.

        Configured providers missing from a stored document get an empty
        history; stored providers that are no longer configured are kept.

        Args:
            providers: (id, name) pairs of configured providers

        Returns:
            TrackerDocument ready for a run
        """
        document = self._read()

        if document is None:
            logger.info("document_initialized", path=str(self.path), providers=len(providers))
            self._loaded_stamp = None
            return TrackerDocument.empty(providers)

        for provider_id, name in providers:
            document.ensure_provider(provider_id, name)

        self._loaded_stamp = document.last_updated
        logger.info(
            "document_loaded",
            path=str(self.path),
            providers=len(document.providers),
            last_updated=document.to_dict()["lastUpdated"],
        )
        return document

    def save(self, document: TrackerDocument) -> None:
        """
        Replace the stored document.

        Args:
            document: Document to persist

        Raises:
            ConcurrentWriteError: If the stored stamp changed since load()
            StoreError: If the document cannot be written
        """
        content = json.dumps(document.to_dict(), indent=2, ensure_ascii=False)

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create {self.path.parent}: {e}") from e

        with self._exclusive_lock():
            current = self._read()
            current_stamp = current.last_updated if current else None
            if current_stamp != self._loaded_stamp:
                raise ConcurrentWriteError(
                    f"{self.path} was modified by another run "
                    f"(expected lastUpdated={self._loaded_stamp}, found {current_stamp})"
                )

            self._write_atomic(content)

        stamp = document.to_dict()["lastUpdated"]
        # Millisecond precision, as stored on disk
        self._loaded_stamp = parse_timestamp(stamp) if stamp else None
        logger.info(
            "document_saved",
            path=str(self.path),
            last_updated=stamp,
        )

    def _write_atomic(self, content: str) -> None:
        """Write content next to the target and swap it in."""
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, suffix=".tmp", prefix=self.path.stem + "_"
            )
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            _discard(tmp_path)
            raise StoreError(f"Cannot write {self.path}: {e}") from e
        except BaseException:
            _discard(tmp_path)
            raise

    def read_raw(self) -> str:
        """Return the stored JSON text verbatim (used by the read API)."""
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except OSError:
        pass
