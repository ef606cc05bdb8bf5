"""
File-backed document collections.

Each collection lives in ``<directory>/<name>.json`` as a JSON array. Every
call loads the whole array, works on it in memory and writes it back; the file
is the only state kept between calls.
"""
import logging
import threading
import weakref
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from ..errors import InvalidDocumentKind
from .codec import CollectionCodec, ON_CORRUPT_RAISE, ensure_directory, validate_collection_name
from .identity import ID_FIELD, RandomSource, ensure_identity, is_document
from .matcher import FilterSpec, Scalar, compile_filter, erase_documents, filter_documents, update_documents

log = logging.getLogger(__name__)

Document = Dict[str, Any]


class Database:
    """JSON-on-disk document collections: one file per collection."""

    def __init__(
        self,
        directory: Path,
        *,
        on_corrupt: str = ON_CORRUPT_RAISE,
        random_source: Optional[RandomSource] = None,
    ):
        self.directory = ensure_directory(Path(directory))
        self.codec = CollectionCodec(self.directory, on_corrupt=on_corrupt)
        self.random_source = random_source
        # An entry lives only while some caller holds its lock
        self._locks: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def __repr__(self):
        return f"<Database directory={str(self.directory)!r}>"

    # --- helpers -----------------------------------------------------------

    def _lock_for(self, collection: str):
        with self._locks_guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = threading.RLock()
                self._locks[collection] = lock
            return lock

    @contextmanager
    def _locked(self, collection: str) -> Iterator[None]:
        # Holds the collection for one whole load -> mutate -> save cycle
        lock = self._lock_for(collection)
        with lock:
            yield

    @staticmethod
    def _id_filter(_id: Any) -> FilterSpec:
        return {ID_FIELD: Scalar(_id)}

    @staticmethod
    def _require_document(value: Any, argument: str = "document") -> Document:
        if not is_document(value):
            raise InvalidDocumentKind(value, argument=argument)
        return value

    @staticmethod
    def _require_documents(documents: Any) -> List[Document]:
        if isinstance(documents, (str, bytes, Mapping)) or not isinstance(documents, Iterable):
            raise InvalidDocumentKind(documents, argument="documents")
        documents = list(documents)
        for i, doc in enumerate(documents):
            Database._require_document(doc, argument=f"documents[{i}]")
        return documents

    @staticmethod
    def _require_updates(updates: Any) -> Mapping[str, Any]:
        Database._require_document(updates, argument="updates")
        if ID_FIELD in updates:
            raise InvalidDocumentKind(
                updates, argument="updates", message=f"'{ID_FIELD}' cannot be changed by an update"
            )
        return updates

    def _identified(self, documents: List[Document]) -> List[Document]:
        """Shallow copies carrying their ``_id``; the caller's dicts stay untouched."""
        return [ensure_identity(dict(doc), self.random_source) for doc in documents]

    def _write(self, collection: str, documents: List[Document]) -> None:
        path = self.codec.save(collection, documents)
        log.debug("Wrote collection '%s' (%d documents) to %s", collection, len(documents), path)

    # --- inserts -----------------------------------------------------------

    def insert_one(self, collection: str, document: Document) -> str:
        """
        Save a new document into ``collection`` and return its ``_id``.

        Once the write has succeeded the document is given its ``_id`` in place
        when it had none.
        """
        validate_collection_name(collection)
        return self.insert_many(collection, [self._require_document(document)])[0]

    def insert_many(self, collection: str, documents: Iterable[Document]) -> List[str]:
        """Save several documents with a single write; returns their ids in input order."""
        validate_collection_name(collection)
        documents = self._require_documents(documents)
        stored = self._identified(documents)

        with self._locked(collection):
            data = self.codec.load(collection)
            data.extend(stored)
            self._write(collection, data)

        for doc, saved in zip(documents, stored):
            doc[ID_FIELD] = saved[ID_FIELD]
        return [saved[ID_FIELD] for saved in stored]

    def replace_collection(self, collection: str, documents: Iterable[Document]) -> List[str]:
        """Overwrite the entire collection with ``documents``."""
        validate_collection_name(collection)
        if not isinstance(documents, (list, tuple)):
            raise InvalidDocumentKind(documents, argument="documents")
        documents = self._require_documents(documents)
        stored = self._identified(documents)

        with self._locked(collection):
            self._write(collection, stored)

        for doc, saved in zip(documents, stored):
            doc[ID_FIELD] = saved[ID_FIELD]
        return [saved[ID_FIELD] for saved in stored]

    # --- reads -------------------------------------------------------------

    def find_by_id(self, collection: str, _id: Any) -> Optional[Document]:
        return self.find_one(collection, self._id_filter(_id))

    def find_one(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> Optional[Document]:
        matches = self.find_many(collection, filter)
        return matches[0] if matches else None

    def find_many(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> List[Document]:
        validate_collection_name(collection)
        compiled = compile_filter(filter)
        with self._locked(collection):
            data = self.codec.load(collection)
        return filter_documents(data, compiled)

    def count(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> int:
        return len(self.find_many(collection, filter))

    # --- updates -----------------------------------------------------------

    def update_by_id(self, collection: str, _id: Any, updates: Mapping[str, Any]) -> Optional[Document]:
        """Merge ``updates`` into the document with ``_id``; returns it as saved, or None."""
        validate_collection_name(collection)
        self._require_updates(updates)
        compiled = self._id_filter(_id)
        with self._locked(collection):
            data = self.codec.load(collection)
            update_documents(data, compiled, updates)
            self._write(collection, data)
            matched = filter_documents(data, compiled)
        return dict(matched[0]) if matched else None

    def update(self, collection: str, filter: Optional[Mapping[str, Any]], updates: Mapping[str, Any]) -> int:
        """Merge ``updates`` into every matching document; returns how many changed."""
        validate_collection_name(collection)
        compiled = compile_filter(filter)
        self._require_updates(updates)
        with self._locked(collection):
            data = self.codec.load(collection)
            changed = update_documents(data, compiled, updates)
            self._write(collection, data)
        return changed

    # --- deletes -----------------------------------------------------------

    def delete_by_id(self, collection: str, _id: Any) -> int:
        return self.delete(collection, self._id_filter(_id))

    def delete(self, collection: str, filter: Optional[Mapping[str, Any]]) -> int:
        """Remove every matching document; returns how many were removed."""
        validate_collection_name(collection)
        compiled = compile_filter(filter)
        with self._locked(collection):
            data = self.codec.load(collection)
            removed = erase_documents(data, compiled)
            self._write(collection, data)
        return removed

    # --- collections -------------------------------------------------------

    def collections(self) -> List[str]:
        return self.codec.names()

    def drop(self, collection: str) -> bool:
        validate_collection_name(collection)
        with self._locked(collection):
            dropped = self.codec.drop(collection)
        if dropped:
            log.info("Dropped collection '%s'", collection)
        return dropped
