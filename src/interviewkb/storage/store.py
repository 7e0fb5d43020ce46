from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence
import fcntl
import logging
import os

from pydantic import TypeAdapter, ValidationError

from interviewkb.ingest.models import ClassifiedQuestion
from interviewkb.utils.config import settings

LOGGER = logging.getLogger(__name__)

_RECORDS = TypeAdapter(List[ClassifiedQuestion])


class StoreReadError(ValueError):
    """Store file exists but could not be decoded."""


class StoreWriteError(RuntimeError):
    """Store snapshot could not be written; nothing was saved."""


class LoadStatus(str, Enum):
    ABSENT = "absent"
    LOADED = "loaded"
    UNREADABLE = "unreadable"


@dataclass
class LoadResult:
    path: Path
    status: LoadStatus
    records: List[ClassifiedQuestion] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.status is not LoadStatus.UNREADABLE


def store_path(data_dir: str | os.PathLike | None = None) -> Path:
    return Path(data_dir or settings.KB_DATA_DIR) / settings.KB_STORE_FILENAME


def _ensure_dir(p: Path):
    p.mkdir(parents=True, exist_ok=True)


# --- read ---

def load_store(path: Path) -> LoadResult:
    path = Path(path)
    if not path.exists():
        LOGGER.debug("no dynamic store at %s, starting empty", path)
        return LoadResult(path, LoadStatus.ABSENT)
    try:
        records = _RECORDS.validate_json(path.read_bytes())
    except (OSError, ValueError, ValidationError) as e:
        return LoadResult(path, LoadStatus.UNREADABLE, error=e)
    LOGGER.debug("loaded %d dynamic questions from %s", len(records), path)
    return LoadResult(path, LoadStatus.LOADED, records=list(records))


def read_store(path: Path) -> List[ClassifiedQuestion]:
    """Lenient read for reporting: an unreadable file is logged and treated as empty."""
    res = load_store(path)
    if not res.ok:
        LOGGER.warning(
            "dynamic store at %s is unreadable (%s: %s); reading it as empty",
            path, type(res.error).__name__, res.error,
        )
    return res.records


# --- write ---

def persist_store(path: Path, records: Sequence[ClassifiedQuestion]) -> None:
    """Rewrite the whole snapshot: temp file in the same dir, then os.replace."""
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    try:
        _ensure_dir(path.parent)
        payload = _RECORDS.dump_json(list(records), by_alias=True, exclude_none=True, indent=2)
        with open(tmp, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except Exception as e:
        LOGGER.error("failed to save dynamic store to %s: %s: %s", path, type(e).__name__, e)
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            pass
        raise StoreWriteError(f"could not write {path}: {type(e).__name__}: {e}") from e
    LOGGER.debug("saved %d dynamic questions to %s", len(records), path)


@contextmanager
def store_lock(data_dir: str | os.PathLike | None = None):
    """Exclusive advisory lock: one writer per data directory.

    Uses fcntl.flock, so POSIX only (Linux/macOS, or the Docker image); the
    package does not import on Windows.
    """
    path = store_path(data_dir)
    _ensure_dir(path.parent)
    handle = open(path.with_name(path.name + ".lock"), "w")
    try:
        fcntl.flock(handle, fcntl.LOCK_EX)
        yield path
    finally:
        try:
            fcntl.flock(handle, fcntl.LOCK_UN)
        finally:
            handle.close()
