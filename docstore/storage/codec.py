"""
Reading and writing whole collections as JSON arrays, one file per collection.
"""
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, List

from ..errors import CorruptCollection, FilesystemError, InvalidCollectionName, SerializationError

log = logging.getLogger(__name__)

COLLECTION_NAME_RE = re.compile(r"[A-Za-z0-9_-]{1,64}")
SUFFIX = ".json"

ON_CORRUPT_RAISE = "raise"
ON_CORRUPT_EMPTY = "empty"
ON_CORRUPT_POLICIES = (ON_CORRUPT_RAISE, ON_CORRUPT_EMPTY)


def _reject_constant(token: str):
    raise ValueError(f"non-standard JSON constant {token}")


def validate_collection_name(name: Any) -> str:
    if not isinstance(name, str) or not COLLECTION_NAME_RE.fullmatch(name):
        raise InvalidCollectionName(name)
    return name


def collection_path(root: Path, name: str) -> Path:
    return Path(root) / f"{validate_collection_name(name)}{SUFFIX}"


def ensure_directory(directory: Path) -> Path:
    directory = Path(directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(directory, "Cannot create directory", e.errno) from e
    return directory


class CollectionCodec:
    """Loads and saves a collection's full document list."""

    def __init__(self, root: Path, on_corrupt: str = ON_CORRUPT_RAISE):
        if on_corrupt not in ON_CORRUPT_POLICIES:
            raise ValueError(f"on_corrupt must be one of {ON_CORRUPT_POLICIES}, got {on_corrupt!r}")
        self.root = Path(root)
        self.on_corrupt = on_corrupt

    def path(self, name: str) -> Path:
        return collection_path(self.root, name)

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def names(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            p.stem for p in self.root.glob(f"*{SUFFIX}")
            if p.is_file() and COLLECTION_NAME_RE.fullmatch(p.stem)
        )

    def load(self, name: str) -> List[Dict[str, Any]]:
        p = self.path(name)
        try:
            raw = p.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise FilesystemError(p, "Cannot read collection", e.errno) from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            return self._corrupt(p, f"invalid UTF-8 at byte {e.start}", e)
        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as e:
            return self._corrupt(p, f"invalid JSON ({e.msg} at line {e.lineno})", e)
        except ValueError as e:
            return self._corrupt(p, str(e), e)

        if not isinstance(data, list):
            return self._corrupt(p, f"expected an array, found {type(data).__name__}")
        for i, doc in enumerate(data):
            if not isinstance(doc, dict):
                return self._corrupt(p, f"element {i} is {type(doc).__name__}, not an object")
        return data

    def _corrupt(self, p: Path, reason: str, cause: Exception = None) -> List[Dict[str, Any]]:
        err = CorruptCollection(p, reason)
        if self.on_corrupt == ON_CORRUPT_EMPTY:
            log.warning("%s; treating it as empty", err)
            return []
        raise err from cause

    def save(self, name: str, documents: List[Dict[str, Any]]) -> Path:
        p = self.path(name)
        # Serialize before touching disk so a bad value never leaves a file behind
        try:
            payload = json.dumps(documents, indent=2, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(name, str(e)) from e

        ensure_directory(p.parent)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=p.parent, prefix=f".{p.stem}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, p)
        except OSError as e:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except FileNotFoundError:
                    pass
            raise FilesystemError(p, "Cannot write collection", e.errno) from e
        return p

    def drop(self, name: str) -> bool:
        p = self.path(name)
        try:
            p.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise FilesystemError(p, "Cannot remove collection", e.errno) from e
        return True
