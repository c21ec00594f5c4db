"""Flask app serving uploaded blobs at the URLs built by ``MongoStore.public_url``."""

import logging
from typing import Callable, Optional

from flask import Blueprint, Flask, current_app, jsonify, make_response
from gridfs import GridFSBucket
from gridfs.errors import NoFile

from carelog.configs import STORAGE_CONFIG
from carelog.errors import error_message

logger = logging.getLogger(__name__)

storage_bp = Blueprint("storage", __name__)


def error_response(key: str, status: int):
    """Build a JSON error response using predefined error definitions."""
    return jsonify({"success": False, "error": error_message(key), "code": key}), status


@storage_bp.route("/storage/<bucket>/<path:path>", methods=["GET"])
def get_blob(bucket, path):
    """Stream a stored photo."""
    if bucket not in current_app.config["CARELOG_PUBLIC_BUCKETS"]:
        return error_response("photo_not_found", 404)

    factory = current_app.config["CARELOG_BUCKET_FACTORY"]
    try:
        grid_out = factory(current_app.config["CARELOG_DB"], bucket_name=bucket).open_download_stream_by_name(path)
    except NoFile:
        logger.info(f"Blob not found: bucket={bucket}, path={path}")
        return error_response("photo_not_found", 404)

    response = make_response(grid_out.read())
    metadata = grid_out.metadata or {}
    response.headers.set("Content-Type", metadata.get("contentType") or "application/octet-stream")
    response.headers.set("Content-Disposition", "inline")
    response.headers.set("Cache-Control", "public, max-age=3600, must-revalidate")
    response.headers.set("ETag", f'"{grid_out._id}"')
    return response


def create_storage_app(db, bucket_factory: Optional[Callable] = None) -> Flask:
    app = Flask(__name__)
    app.config["CARELOG_DB"] = db
    app.config["CARELOG_BUCKET_FACTORY"] = bucket_factory or GridFSBucket
    app.config["CARELOG_PUBLIC_BUCKETS"] = {STORAGE_CONFIG["pet_photos_bucket"]}
    app.register_blueprint(storage_bp)
    return app
