"""
Filter matching for stored documents.

A filter is a mapping of field name to either a scalar (the field must equal
it) or a list of candidates (the field must equal one of them). Every key must
match; an empty filter matches everything.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..errors import InvalidDocumentKind

_SCALAR_TYPES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class Scalar:
    value: Any

    def accepts(self, candidate: Any) -> bool:
        return _json_equal(candidate, self.value)


@dataclass(frozen=True)
class OneOf:
    values: Tuple[Any, ...]

    def accepts(self, candidate: Any) -> bool:
        return any(_json_equal(candidate, v) for v in self.values)


FilterValue = Union[Scalar, OneOf]
FilterSpec = Dict[str, FilterValue]

# Marker for a field the document does not have; never equal to anything.
_MISSING = object()


def _json_equal(a: Any, b: Any) -> bool:
    if a is _MISSING or b is _MISSING:
        return False
    # JSON booleans are not numbers: true must not match 1
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def _check_scalar(field: str, value: Any) -> Any:
    if not isinstance(value, _SCALAR_TYPES):
        raise InvalidDocumentKind(value, argument=f"filter.{field}")
    return value


def compile_filter(spec: Optional[Mapping[str, Any]]) -> FilterSpec:
    """Convert a plain filter mapping into its tagged form."""
    if spec is None:
        return {}
    if not isinstance(spec, Mapping):
        raise InvalidDocumentKind(spec, argument="filter")

    compiled: FilterSpec = {}
    for field, value in spec.items():
        if isinstance(value, (Scalar, OneOf)):
            compiled[field] = value
        elif isinstance(value, (list, tuple)):
            compiled[field] = OneOf(tuple(_check_scalar(field, v) for v in value))
        else:
            compiled[field] = Scalar(_check_scalar(field, value))
    return compiled


def matches(document: Mapping[str, Any], spec: Optional[Mapping[str, Any]]) -> bool:
    compiled = compile_filter(spec)
    return _matches_compiled(document, compiled)


def _matches_compiled(document: Mapping[str, Any], compiled: FilterSpec) -> bool:
    return all(
        condition.accepts(document.get(field, _MISSING))
        for field, condition in compiled.items()
    )


def filter_documents(documents: Iterable[Mapping[str, Any]], spec) -> List[Mapping[str, Any]]:
    compiled = compile_filter(spec)
    return [doc for doc in documents if _matches_compiled(doc, compiled)]


def update_documents(documents: List[Dict[str, Any]], spec, updates: Mapping[str, Any]) -> int:
    """Shallow-merge ``updates`` into every matching document, in place."""
    compiled = compile_filter(spec)
    count = 0
    for doc in documents:
        if _matches_compiled(doc, compiled):
            doc.update(updates)
            count += 1
    return count


def erase_documents(documents: List[Dict[str, Any]], spec) -> int:
    """Remove matching documents in place, keeping the order of the rest."""
    compiled = compile_filter(spec)
    kept = [doc for doc in documents if not _matches_compiled(doc, compiled)]
    removed = len(documents) - len(kept)
    documents[:] = kept
    return removed
