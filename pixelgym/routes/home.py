from flask import Blueprint, jsonify

home_bp = Blueprint('home', __name__)


@home_bp.route('/health')
def health():
    return jsonify({"status": "ok"})
