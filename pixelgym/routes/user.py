from flask import Blueprint, request, jsonify, current_app

from pixelgym.domain.achievements.services import (
    PinRejected, clean_definitions, pin_badge, progress_for, unlocked_ids, unpin_badge,
)
from pixelgym.domain.users.services import (
    find_user, is_coach, is_student, is_super_admin, keep_protected, protected_changes,
    visible_users,
)
from pixelgym.errors import BadRequest, Conflict, Forbidden, IdentityError
from pixelgym.extensions import db
from pixelgym.schemas import CoachAssignSchema, PinSchema, StatusSchema, UserSchema
from pixelgym.services import get_identity_service, get_record_store
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import get_or_404, load_logs, load_overrides, load_users

user_bp = Blueprint("user", __name__)
user_schema = UserSchema()
status_schema = StatusSchema()
coach_assign_schema = CoachAssignSchema()
pin_schema = PinSchema()


def get_user_or_404(user_id):
    return get_or_404("user", user_id, "User")


def require_super_admin(current_user):
    if not is_super_admin(current_user):
        raise Forbidden("Only the administrator can do this")


@user_bp.route("", methods=["GET"])
@require_account()
def list_users(current_user):
    return jsonify(visible_users(current_user, load_users())), 200


@user_bp.route("/<user_id>", methods=["GET"])
@require_account()
def get_user(user_id, current_user):
    user = get_user_or_404(user_id)
    visible = {u["id"] for u in visible_users(current_user, load_users())}
    if user_id not in visible:
        raise Forbidden("Not allowed to view this user")
    return jsonify(user), 200


@user_bp.route("", methods=["POST"])
@require_account()
def upsert_user(current_user):
    """Full-object upsert of a profile keyed by ``id``.

    Users may rewrite their own profile. Role, status, coach link, name and the
    badge fields are reserved: they are carried over from the stored profile
    when left out and rejected when changed. Role never changes.
    """
    body = user_schema.load(request.get_json(silent=True) or {})
    store = get_record_store()
    existing = store.get(f"user:{body['id']}")

    if not is_super_admin(current_user):
        if body["id"] != current_user["id"] or existing is None:
            raise Forbidden("Not allowed to modify this user")
        changed = protected_changes(existing, body)
        if changed:
            raise Forbidden(f"Not allowed to change: {', '.join(changed)}")
        body = keep_protected(existing, body)
    else:
        if existing and "role" in existing:
            body.setdefault("role", existing["role"])
        if "definedAchievements" in body:
            try:
                body["definedAchievements"] = clean_definitions(body, body["definedAchievements"])
            except ValueError as e:
                raise BadRequest(f"Invalid achievement: {e}")

    if existing and body.get("role") != existing.get("role"):
        raise BadRequest("Role cannot be changed")
    if existing is None and not body.get("name"):
        raise BadRequest("Missing name")

    store.set(f"user:{body['id']}", body)
    return jsonify({"success": True, "user": body}), 200


@user_bp.route("/<user_id>", methods=["DELETE"])
@require_account()
def delete_user(user_id, current_user):
    require_super_admin(current_user)
    if user_id == current_user["id"]:
        raise BadRequest("The administrator account cannot be deleted")

    try:
        get_identity_service().delete_account(user_id)
        current_app.logger.info(f"User {user_id} deleted from identity service")
    except IdentityError as e:
        # the profile is removed even when this fails
        current_app.logger.error(f"Failed to delete user {user_id} from identity service: {e}")
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"Identity service error while deleting user {user_id}")

    get_record_store().delete(f"user:{user_id}")
    return jsonify({"success": True}), 200


@user_bp.route("/<user_id>/status", methods=["POST"])
@require_account()
def set_status(user_id, current_user):
    require_super_admin(current_user)
    data = status_schema.load(request.get_json(silent=True) or {})
    get_user_or_404(user_id)

    def apply(user):
        user["status"] = data["status"]
        return user

    user = get_record_store().mutate(f"user:{user_id}", apply)
    return jsonify({"success": True, "user": user}), 200


@user_bp.route("/<user_id>/coach", methods=["POST"])
@require_account()
def assign_coach(user_id, current_user):
    require_super_admin(current_user)
    data = coach_assign_schema.load(request.get_json(silent=True) or {})
    student = get_user_or_404(user_id)
    if not is_student(student):
        raise BadRequest("Only students can be assigned a coach")

    coach_id = data["coachId"] or ""
    if coach_id:
        coach = find_user(load_users(), coach_id)
        if not coach or not (is_coach(coach) or is_super_admin(coach)):
            raise BadRequest("Coach not found")

    def apply(user):
        user["coachId"] = coach_id
        return user

    user = get_record_store().mutate(f"user:{user_id}", apply)
    return jsonify({"success": True, "user": user}), 200


@user_bp.route("/<user_id>/achievements", methods=["GET"])
@require_account()
def user_achievements(user_id, current_user):
    student = get_user_or_404(user_id)
    visible = {u["id"] for u in visible_users(current_user, load_users())}
    if user_id not in visible:
        raise Forbidden("Not allowed to view this user")

    progress = progress_for(student, load_logs(), load_users(), load_overrides())
    return jsonify(progress), 200


@user_bp.route("/<user_id>/badges", methods=["POST"])
@require_account()
def pin(user_id, current_user):
    if user_id != current_user["id"]:
        raise Forbidden("Students pin their own badges")
    data = pin_schema.load(request.get_json(silent=True) or {})

    store = get_record_store()
    unlocked = unlocked_ids(current_user, load_logs(), load_users(), load_overrides())
    try:
        user = pin_badge(current_user, data["achievementId"], unlocked)
    except PinRejected as e:
        raise Conflict(e.message, code=e.code)

    store.set(f"user:{user_id}", user)
    return jsonify({"success": True, "user": user}), 200


@user_bp.route("/<user_id>/badges/<achievement_id>", methods=["DELETE"])
@require_account()
def unpin(user_id, achievement_id, current_user):
    if user_id != current_user["id"]:
        raise Forbidden("Students pin their own badges")
    user = unpin_badge(current_user, achievement_id)
    get_record_store().set(f"user:{user_id}", user)
    return jsonify({"success": True, "user": user}), 200
