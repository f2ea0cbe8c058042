from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import decode_token, get_jwt, get_jwt_identity, jwt_required

from pixelgym.domain.users.services import find_user_by_name, login_block_reason, new_profile
from pixelgym.errors import Forbidden, IdentityError, Unauthorized
from pixelgym.extensions import limiter
from pixelgym.schemas import SignupSchema, SigninSchema, UpdateAccountSchema
from pixelgym.services import get_identity_service, get_record_store
from pixelgym.utils.decorators import require_account

auth_bp = Blueprint("auth", __name__)
signup_schema = SignupSchema()
signin_schema = SigninSchema()
update_account_schema = UpdateAccountSchema()


def email_for(name):
    return f"{name}@{current_app.config['EMAIL_DOMAIN']}"


@auth_bp.route("/signup", methods=["POST"])
@limiter.limit(lambda: current_app.config["SIGNUP_RATE_LIMIT"])
def signup():
    data = signup_schema.load(request.get_json(silent=True) or {})
    store = get_record_store()

    if find_user_by_name(store.get_by_prefix("user:"), data["name"]):
        raise IdentityError("User already been registered", code="email_exists")

    email = data["email"] or email_for(data["name"])
    identity = get_identity_service().sign_up(
        email, data["password"], metadata={"name": data["name"], "role": data["role"]}
    )

    user = new_profile(identity.id, data["name"], data["role"])
    store.set(f"user:{identity.id}", user)
    current_app.logger.info(f"Signed up {user['name']} as {user['role']}")
    return jsonify({"user": user}), 201


@auth_bp.route("/signin", methods=["POST"])
@limiter.limit(lambda: current_app.config["SIGNIN_RATE_LIMIT"])
def signin():
    data = signin_schema.load(request.get_json(silent=True) or {})
    if not data["email"] and not data["name"]:
        raise IdentityError("Name or email is required", code="missing_credentials")

    identities = get_identity_service()
    session = identities.sign_in(data["email"] or email_for(data["name"]), data["password"])

    user = get_record_store().get(f"user:{session['user']['id']}")
    if not user:
        raise IdentityError("User profile not found", code="profile_missing")

    reason = login_block_reason(user)
    if reason:
        # revoke the token that was just issued
        identities.sign_out(decode_token(session["access_token"])["jti"])
        raise Forbidden("Account is not allowed to sign in", code=reason)

    return jsonify({"session": session, "user": user}), 200


@auth_bp.route("/signout", methods=["POST"])
@jwt_required()
def signout():
    get_identity_service().sign_out(get_jwt()["jti"])
    return jsonify({"success": True}), 200


@auth_bp.route("/session", methods=["GET"])
@require_account()
def session(current_user):
    token = request.headers.get("Authorization", "").split(" ")[-1]
    found = get_identity_service().get_session(token)
    if found is None:
        raise Unauthorized("Session expired")
    return jsonify({"session": found, "user": current_user}), 200


@auth_bp.route("/update-account", methods=["POST"])
@jwt_required()
def update_account():
    data = update_account_schema.load(request.get_json(silent=True) or {})
    if data["email"] or data["password"]:
        get_identity_service().update_account(
            get_jwt_identity(), email=data["email"], password=data["password"]
        )
    return jsonify({"success": True}), 200
