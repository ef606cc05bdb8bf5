from .codec import CollectionCodec, collection_path, validate_collection_name
from .database import Database
from .identity import RandomSource, SystemRandomSource, ensure_identity
from .matcher import OneOf, Scalar, compile_filter, matches

__all__ = [
    "CollectionCodec",
    "Database",
    "OneOf",
    "RandomSource",
    "Scalar",
    "SystemRandomSource",
    "collection_path",
    "compile_filter",
    "ensure_identity",
    "matches",
    "validate_collection_name",
]
