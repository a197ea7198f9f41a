import os

from flask import Blueprint, current_app, send_from_directory

bp = Blueprint("uploads", __name__, url_prefix="/uploads")


@bp.route("/<path:path>", methods=["GET"])
def serve_upload(path):
    root = current_app.extensions["blob_store"].root
    return send_from_directory(os.path.abspath(root), path)
