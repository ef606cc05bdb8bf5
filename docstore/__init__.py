import logging

from flask import Flask

from .config import Config
from .errors import (
    CorruptCollection,
    DocstoreError,
    FilesystemError,
    InvalidCollectionName,
    InvalidDocumentKind,
    SerializationError,
)
from .extensions import cors, init_store
from .storage.database import Database

__all__ = [
    "Config",
    "CorruptCollection",
    "Database",
    "DocstoreError",
    "FilesystemError",
    "InvalidCollectionName",
    "InvalidDocumentKind",
    "SerializationError",
    "create_app",
]


def create_app(config_class: type[Config] = Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = False
    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])

    # Extensions
    cors.init_app(app)
    init_store(app)

    # Blueprints
    from .routes.collections_api import bp as collections_api

    app.register_blueprint(collections_api, url_prefix="/api")

    return app
