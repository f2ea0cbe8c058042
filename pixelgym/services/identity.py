from datetime import datetime

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from pixelgym.errors import IdentityError
from pixelgym.extensions import db
from pixelgym.models import Identity, RevokedToken


def _session_for(identity):
    token = create_access_token(identity=identity.id)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": {
            "id": identity.id,
            "email": identity.email,
            "user_metadata": identity.user_metadata or {},
        },
    }


class IdentityService:
    """Email/password accounts and session tokens.

    User ids are stable across logins; a session is a signed access token.
    """

    def sign_up(self, email, password, metadata=None):
        email = email.strip().lower()
        if Identity.query.filter_by(email=email).first():
            raise IdentityError("User already been registered", code="email_exists")

        identity = Identity(email=email, user_metadata=metadata or {})
        identity.set_password(password)
        db.session.add(identity)
        db.session.commit()
        current_app.logger.info(f"Identity created for {email}")
        return identity

    def sign_in(self, email, password):
        identity = Identity.query.filter_by(email=email.strip().lower()).first()
        if not identity or not identity.check_password(password):
            current_app.logger.info(f"Sign-in failed for {email}")
            raise IdentityError("Invalid login credentials", code="invalid_credentials")

        identity.last_sign_in_at = datetime.utcnow()
        db.session.commit()
        return _session_for(identity)

    def sign_out(self, jti):
        if not RevokedToken.query.filter_by(jti=jti).first():
            db.session.add(RevokedToken(jti=jti))
            db.session.commit()

    def get_session(self, token):
        try:
            claims = decode_token(token)
        except (PyJWTError, JWTExtendedException):
            return None
        if self.is_revoked(claims["jti"]):
            return None
        identity = db.session.get(Identity, claims["sub"])
        if identity is None:
            return None
        return {
            "access_token": token,
            "token_type": "bearer",
            "user": {
                "id": identity.id,
                "email": identity.email,
                "user_metadata": identity.user_metadata or {},
            },
        }

    def is_revoked(self, jti):
        return RevokedToken.query.filter_by(jti=jti).first() is not None

    def update_account(self, user_id, email=None, password=None):
        identity = db.session.get(Identity, user_id)
        if identity is None:
            raise IdentityError("User not found", code="user_not_found")

        if email:
            email = email.strip().lower()
            taken = Identity.query.filter(Identity.email == email, Identity.id != user_id).first()
            if taken:
                raise IdentityError("User already been registered", code="email_exists")
            identity.email = email
        if password:
            identity.set_password(password)
        db.session.commit()
        return identity

    def delete_account(self, user_id):
        identity = db.session.get(Identity, user_id)
        if identity is None:
            raise IdentityError("User not found", code="user_not_found")
        db.session.delete(identity)
        db.session.commit()


def get_identity_service():
    return current_app.extensions["identity_service"]
