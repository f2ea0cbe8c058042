import logging
import os

from flask import Flask, current_app, jsonify, request

from pixelgym.config import config
from pixelgym.errors import register_error_handlers
from pixelgym.extensions import cors, db, jwt, limiter, ma, migrate
from pixelgym.services import BlobStore, IdentityService, RecordStore


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(level)

    @app.after_request
    def log_request(response):
        app.logger.info(f"{request.method} {request.path} {response.status_code}")
        return response


def configure_jwt():
    @jwt.token_in_blocklist_loader
    def token_revoked(jwt_header, jwt_payload):
        return current_app.extensions["identity_service"].is_revoked(jwt_payload["jti"])

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": "Session expired"}), 401

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return jsonify({"error": "Session revoked"}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return jsonify({"error": f"Invalid token: {error}"}), 401

    @jwt.unauthorized_loader
    def unauthorized_callback(error):
        return jsonify({"error": "No token provided"}), 401


def register_blueprints(app):
    from pixelgym.routes.home import home_bp
    from pixelgym.routes.auth import auth_bp
    from pixelgym.routes.user import user_bp
    from pixelgym.routes.logs import logs_bp
    from pixelgym.routes.exercises import exercises_bp
    from pixelgym.routes.battles import battles_bp
    from pixelgym.routes.achievements import achievements_bp
    from pixelgym.routes.upload import upload_bp, files_bp
    from pixelgym.routes.admin import admin_bp

    prefix = app.config['API_PREFIX'].rstrip('/')
    app.register_blueprint(home_bp, url_prefix=prefix)
    app.register_blueprint(auth_bp, url_prefix=prefix)
    app.register_blueprint(user_bp, url_prefix=f"{prefix}/users")
    app.register_blueprint(logs_bp, url_prefix=f"{prefix}/logs")
    app.register_blueprint(exercises_bp, url_prefix=f"{prefix}/exercises")
    app.register_blueprint(battles_bp, url_prefix=f"{prefix}/battles")
    app.register_blueprint(achievements_bp, url_prefix=f"{prefix}/achievements")
    app.register_blueprint(upload_bp, url_prefix=prefix)
    app.register_blueprint(files_bp, url_prefix=prefix)
    app.register_blueprint(admin_bp, url_prefix=f"{prefix}/admin")


def create_app(config_name=None):
    app = Flask(__name__)
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    app.config.from_object(config[config_name])
    app.url_map.strict_slashes = False

    configure_logging(app)

    # Extensions
    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors.init_app(app, resources={r"/*": {
        "origins": app.config['CORS_ORIGINS'],
        "allow_headers": ["Content-Type", "Authorization", "apikey", "x-client-info"],
        "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        "expose_headers": ["Content-Length"],
        "max_age": 600,
    }})
    configure_jwt()

    # Collaborators, one instance per app
    app.extensions["record_store"] = RecordStore()
    app.extensions["identity_service"] = IdentityService()
    app.extensions["blob_store"] = BlobStore(
        folder=os.path.abspath(app.config['UPLOAD_FOLDER']),
        secret=app.config['SECRET_KEY'],
        ttl=app.config['SIGNED_URL_TTL'],
        extensions=app.config['UPLOAD_EXTENSIONS'],
    )

    register_error_handlers(app)
    register_blueprints(app)

    with app.app_context():
        from pixelgym import models  # noqa: F401  registers the tables
        db.create_all()

    return app
