from flask import current_app
from flask_cors import CORS

from .storage.database import Database

cors = CORS()

EXTENSION_KEY = "docstore"


def init_store(app) -> Database:
    store = Database(app.config["DATA_DIR"], on_corrupt=app.config["ON_CORRUPT"])
    app.extensions[EXTENSION_KEY] = store
    return store


def get_store() -> Database:
    return current_app.extensions[EXTENSION_KEY]
