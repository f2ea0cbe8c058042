from flask import Blueprint, request, jsonify
from pydantic import ValidationError as PydanticValidationError

from pixelgym.domain.achievements.schemas import Achievement
from pixelgym.domain.achievements.services import (
    SYSTEM_IDS, achievements_for, audience_allowed, coach_achievements, system_achievements,
)
from pixelgym.domain.users.services import is_coach, is_student, is_super_admin
from pixelgym.errors import BadRequest, Forbidden, NotFound
from pixelgym.schemas import ThresholdSchema
from pixelgym.services import get_record_store
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import SYSTEM_ACHIEVEMENTS_KEY, load_overrides, load_users

achievements_bp = Blueprint("achievements", __name__)
threshold_schema = ThresholdSchema()


def dump(achievements):
    return [a.model_dump() for a in achievements]


@achievements_bp.route("", methods=["GET"])
@require_account()
def list_achievements(current_user):
    """System achievements plus the coach-defined ones relevant to the caller."""
    overrides = load_overrides()
    if is_student(current_user):
        return jsonify(dump(achievements_for(current_user, load_users(), overrides))), 200
    return jsonify(dump(system_achievements(overrides) + coach_achievements(current_user))), 200


@achievements_bp.route("", methods=["POST"])
@require_account()
def define_achievement(current_user):
    if not is_coach(current_user):
        raise Forbidden("Only coaches can define achievements")

    body = dict(request.get_json(silent=True) or {})
    body["creatorId"] = current_user["id"]
    try:
        achievement = Achievement.model_validate(body)
    except PydanticValidationError as e:
        raise BadRequest(f"Invalid achievement: {e.errors(include_url=False)}")
    if achievement.id in SYSTEM_IDS:
        raise BadRequest("Achievement id is reserved")

    if not audience_allowed(achievement, current_user, load_users()):
        raise BadRequest("Target audience must be 'all' or one of your students")

    def apply(coach):
        defined = [a for a in coach.get("definedAchievements") or [] if a.get("id") != achievement.id]
        coach["definedAchievements"] = defined + [achievement.model_dump()]
        return coach

    get_record_store().mutate(f"user:{current_user['id']}", apply)
    return jsonify({"success": True, "achievement": achievement.model_dump()}), 201


@achievements_bp.route("/<achievement_id>", methods=["DELETE"])
@require_account()
def delete_achievement(achievement_id, current_user):
    if achievement_id in SYSTEM_IDS:
        raise Forbidden("System achievements cannot be deleted")
    if not is_coach(current_user):
        raise Forbidden("Only coaches can delete achievements")

    def apply(coach):
        coach["definedAchievements"] = [
            a for a in coach.get("definedAchievements") or [] if a.get("id") != achievement_id
        ]
        return coach

    get_record_store().mutate(f"user:{current_user['id']}", apply)
    return jsonify({"success": True}), 200


@achievements_bp.route("/system/<achievement_id>", methods=["PUT"])
@require_account()
def set_threshold(achievement_id, current_user):
    if not is_super_admin(current_user):
        raise Forbidden("Only the administrator can change system thresholds")
    if achievement_id not in SYSTEM_IDS:
        raise NotFound("Achievement not found")
    data = threshold_schema.load(request.get_json(silent=True) or {})

    value = data["criteriaValue"]
    if float(value).is_integer():
        value = int(value)
    store = get_record_store()
    overrides = load_overrides()
    overrides[achievement_id] = value
    store.set(SYSTEM_ACHIEVEMENTS_KEY, overrides)

    updated = next(a for a in system_achievements(overrides) if a.id == achievement_id)
    return jsonify({"success": True, "achievement": updated.model_dump()}), 200
