from pathlib import Path
from typing import Any, Optional


class DocstoreError(Exception):
    """Base class for every error raised by the document store."""


class InvalidCollectionName(DocstoreError, ValueError):
    def __init__(self, name: Any):
        self.name = name
        super().__init__(
            f"Invalid collection name {name!r}: use 1-64 letters, digits, '_' or '-'"
        )


class InvalidDocumentKind(DocstoreError, TypeError):
    def __init__(self, value: Any, argument: str = "document", message: Optional[str] = None):
        self.value = value
        self.argument = argument
        super().__init__(
            message or f"Expected an object for '{argument}', but received {type(value).__name__}"
        )


class CorruptCollection(DocstoreError):
    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Collection file {self.path} is corrupt: {reason}")


class SerializationError(DocstoreError):
    def __init__(self, collection: str, reason: str):
        self.collection = collection
        super().__init__(f"Cannot serialize collection '{collection}': {reason}")


class FilesystemError(DocstoreError, OSError):
    def __init__(self, path: Path, reason: str, errno: Optional[int] = None):
        self.path = Path(path)
        self.reason = reason
        # OSError.__init__ with (errno, strerror) populates .errno / .strerror
        if errno is not None:
            super().__init__(errno, f"{reason}: {self.path}")
        else:
            super().__init__(f"{reason}: {self.path}")

    def __str__(self):
        return f"{self.reason}: {self.path}"
