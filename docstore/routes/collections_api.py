from flask import Blueprint, current_app, jsonify, request

from ..errors import (
    CorruptCollection,
    DocstoreError,
    FilesystemError,
    InvalidCollectionName,
    InvalidDocumentKind,
    SerializationError,
)
from ..extensions import get_store

bp = Blueprint("collections_api", __name__)


def _error(status: int, err: Exception):
    return jsonify({"error": type(err).__name__, "message": str(err)}), status


@bp.errorhandler(InvalidCollectionName)
@bp.errorhandler(InvalidDocumentKind)
@bp.errorhandler(SerializationError)
def _bad_request(err: DocstoreError):
    current_app.logger.warning("Rejected request: %s", err)
    return _error(400, err)


@bp.errorhandler(CorruptCollection)
@bp.errorhandler(FilesystemError)
def _storage_failure(err: DocstoreError):
    current_app.logger.error("Storage failure: %s", err, exc_info=err)
    return _error(500, err)


def _json_body():
    body = request.get_json(silent=True)
    if body is None:
        raise InvalidDocumentKind(None, argument="request body")
    return body


def _query_filter() -> dict:
    """Query-string filter: ?relation=son&name=Liam&name=Max -> name in [Liam, Max]."""
    flt = {}
    for key in request.args.keys():
        values = request.args.getlist(key)
        flt[key] = values if len(values) > 1 else values[0]
    return flt


@bp.get("/collections")
def list_collections():
    return jsonify(get_store().collections())


@bp.delete("/collections/<name>")
def drop_collection(name: str):
    dropped = get_store().drop(name)
    if not dropped:
        return jsonify({"error": "not_found", "collection": name}), 404
    return jsonify({"status": "ok", "collection": name})


@bp.get("/collections/<name>/documents")
def list_documents(name: str):
    return jsonify(get_store().find_many(name, _query_filter()))


@bp.post("/collections/<name>/documents")
def insert_documents(name: str):
    body = _json_body()
    store = get_store()
    if isinstance(body, list):
        ids = store.insert_many(name, body)
    else:
        ids = [store.insert_one(name, body)]
    return jsonify({"status": "ok", "ids": ids}), 201


@bp.get("/collections/<name>/documents/<doc_id>")
def get_document(name: str, doc_id: str):
    doc = get_store().find_by_id(name, doc_id)
    if doc is None:
        return jsonify({"error": "not_found", "_id": doc_id}), 404
    return jsonify(doc)


@bp.patch("/collections/<name>/documents/<doc_id>")
def update_document(name: str, doc_id: str):
    body = _json_body()
    doc = get_store().update_by_id(name, doc_id, body)
    if doc is None:
        return jsonify({"error": "not_found", "_id": doc_id}), 404
    return jsonify(doc)


@bp.delete("/collections/<name>/documents/<doc_id>")
def delete_document(name: str, doc_id: str):
    removed = get_store().delete_by_id(name, doc_id)
    if not removed:
        return jsonify({"error": "not_found", "_id": doc_id}), 404
    return jsonify({"status": "ok", "deleted": removed})


@bp.post("/collections/<name>/query")
def query_documents(name: str):
    body = _json_body()
    if not isinstance(body, dict):
        raise InvalidDocumentKind(body, argument="request body")
    return jsonify(get_store().find_many(name, body.get("filter") or {}))


@bp.post("/collections/<name>/update")
def update_documents(name: str):
    body = _json_body()
    if not isinstance(body, dict):
        raise InvalidDocumentKind(body, argument="request body")
    changed = get_store().update(name, body.get("filter") or {}, body.get("update"))
    return jsonify({"status": "ok", "updated": changed})


@bp.post("/collections/<name>/delete")
def delete_documents(name: str):
    body = _json_body()
    if not isinstance(body, dict):
        raise InvalidDocumentKind(body, argument="request body")
    if "filter" not in body:
        # an omitted filter would wipe the collection
        raise InvalidDocumentKind(None, argument="filter")
    removed = get_store().delete(name, body["filter"])
    return jsonify({"status": "ok", "deleted": removed})
