import hashlib
import hmac
import os
import secrets
import time

from flask import current_app, url_for
from werkzeug.utils import secure_filename
from pixelgym.errors import BadRequest, Forbidden, NotFound


def allowed_file(filename, extensions):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in extensions


class BlobStore:
    """Stores uploaded images on disk and hands out long-lived signed URLs."""

    def __init__(self, folder, secret, ttl, extensions):
        self.folder = folder
        self.secret = secret.encode()
        self.ttl = ttl
        self.extensions = extensions

    def _signature(self, name, expires):
        payload = f"{name}:{expires}"
        return hmac.new(self.secret, payload.encode(), hashlib.sha256).hexdigest()

    def upload(self, file):
        if not file or not file.filename:
            raise BadRequest("No file uploaded")
        filename = secure_filename(file.filename)
        if not allowed_file(filename, self.extensions):
            raise BadRequest("Invalid file type")

        ext = filename.rsplit('.', 1)[1].lower()
        name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"
        os.makedirs(self.folder, exist_ok=True)
        file.save(os.path.join(self.folder, name))
        current_app.logger.info(f"Stored upload {name}")
        return self.signed_url(name)

    def signed_url(self, name):
        expires = int(time.time()) + self.ttl
        return url_for(
            "files.download",
            name=name,
            expires=expires,
            signature=self._signature(name, expires),
            _external=True,
        )

    def open(self, name, expires, signature):
        """Return the on-disk path of ``name`` if the signature is valid."""
        if time.time() > expires:
            raise Forbidden("Signed URL expired")
        expected = self._signature(name, expires)
        if not hmac.compare_digest(expected, signature or ""):
            raise Forbidden("Invalid signature")

        path = os.path.join(self.folder, secure_filename(name))
        if not os.path.isfile(path):
            raise NotFound("File not found")
        return path


def get_blob_store():
    return current_app.extensions["blob_store"]
