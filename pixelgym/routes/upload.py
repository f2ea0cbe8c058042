from flask import Blueprint, request, jsonify, send_file

from pixelgym.errors import BadRequest
from pixelgym.services import get_blob_store
from pixelgym.utils.decorators import require_account

upload_bp = Blueprint("upload", __name__)
files_bp = Blueprint("files", __name__)


@upload_bp.route("/upload", methods=["POST"])
@require_account()
def upload(current_user):
    if "file" not in request.files:
        raise BadRequest("No file uploaded")
    url = get_blob_store().upload(request.files["file"])
    return jsonify({"url": url}), 200


@files_bp.route("/files/<name>", methods=["GET"])
def download(name):
    try:
        expires = int(request.args.get("expires", ""))
    except ValueError:
        raise BadRequest("Invalid signed URL")
    path = get_blob_store().open(name, expires, request.args.get("signature"))
    return send_file(path)
