import logging
import os
import time

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from rupay.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def proof_path(user_id, filename, now_ms=None):
    """Storage path for a proof-of-payment upload, namespaced by user and time."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"investment_proofs/{user_id}/{now_ms}_{secure_filename(filename)}"


def _stream_size(stream):
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


class BlobStore:
    """Stores uploaded files under UPLOAD_FOLDER and hands back a download URL."""

    def __init__(self, root=None):
        self._root = root

    @property
    def root(self):
        return self._root or current_app.config["UPLOAD_FOLDER"]

    def resolve(self, path):
        full = os.path.abspath(os.path.join(self.root, path))
        if not full.startswith(os.path.abspath(self.root) + os.sep):
            raise ValidationError("Invalid upload path", code="INVALID_PATH")
        return full

    def validate(self, file):
        if not file or not file.filename:
            raise ValidationError("Transaction proof file is required", code="MISSING_FILE")

        allowed = current_app.config["ALLOWED_PROOF_TYPES"]
        if file.mimetype not in allowed:
            raise ValidationError(
                "Please upload a JPG, PNG, or GIF image.",
                code="INVALID_FILE_TYPE",
                details={"allowed": list(allowed)},
            )

        size = _stream_size(file.stream)
        max_bytes = current_app.config["MAX_PROOF_BYTES"]
        if size > max_bytes:
            raise ValidationError(
                "Please upload an image under 5MB.",
                code="FILE_TOO_LARGE",
                details={"max_bytes": max_bytes, "size": size},
            )
        return size

    def upload(self, path, file, on_progress=None):
        total = self.validate(file)
        full = self.resolve(path)
        os.makedirs(os.path.dirname(full), exist_ok=True)

        transferred = 0
        with open(full, "wb") as out:
            while True:
                chunk = file.stream.read(CHUNK_SIZE)
                if not chunk:
                    break
                out.write(chunk)
                transferred += len(chunk)
                if on_progress:
                    on_progress(transferred, total)

        logger.info("Stored upload %s (%d bytes)", path, transferred)
        return url_for("uploads.serve_upload", path=path, _external=True)

    def remove(self, path):
        full = self.resolve(path)
        if os.path.exists(full):
            os.remove(full)
            logger.info("Removed upload %s", path)
