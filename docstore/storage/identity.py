import secrets
from typing import Any, Dict, Optional, Protocol

from ..errors import InvalidDocumentKind

ID_FIELD = "_id"
ID_BYTES = 8


class RandomSource(Protocol):
    def token_bytes(self, nbytes: int) -> bytes:
        ...


class SystemRandomSource:
    """Cryptographically strong bytes from the OS."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)


_default_source = SystemRandomSource()


def random_hex(nbytes: int = ID_BYTES, source: Optional[RandomSource] = None) -> str:
    raw = (source or _default_source).token_bytes(nbytes)
    if len(raw) != nbytes:
        raise ValueError(f"random source returned {len(raw)} bytes, expected {nbytes}")
    return raw.hex()


def is_document(value: Any) -> bool:
    return isinstance(value, dict)


def ensure_identity(document: Dict[str, Any], source: Optional[RandomSource] = None) -> Dict[str, Any]:
    """
    Make sure ``document`` carries an ``_id``.

    The mapping is modified in place and returned. A missing or falsy ``_id``
    is replaced by 16 random hex characters; an existing one must be a string
    and is left alone.
    """
    if not is_document(document):
        raise InvalidDocumentKind(document)
    _id = document.get(ID_FIELD)
    if not _id:
        document[ID_FIELD] = random_hex(ID_BYTES, source)
    elif not isinstance(_id, str):
        raise InvalidDocumentKind(
            _id, argument=ID_FIELD, message=f"'{ID_FIELD}' must be a string, got {type(_id).__name__}"
        )
    return document
