from flask import Blueprint, request, jsonify

from pixelgym.domain.exercises.services import can_manage_exercise, make_exercise, visible_exercises
from pixelgym.domain.users.services import is_coach, is_super_admin
from pixelgym.errors import Forbidden
from pixelgym.schemas import ExerciseSchema
from pixelgym.services import get_record_store
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import load_users

exercises_bp = Blueprint("exercises", __name__)
exercise_schema = ExerciseSchema()


def save_exercise(current_user, body):
    if not (is_coach(current_user) or is_super_admin(current_user)):
        raise Forbidden("Only coaches can edit the wiki")

    store = get_record_store()
    exercise = make_exercise(body, current_user)
    existing = store.get(f"exercise:{exercise['id']}")
    if existing:
        if not can_manage_exercise(current_user, existing):
            raise Forbidden("Not allowed to edit this exercise")
        # an administrator edit keeps the original author
        exercise["author"] = existing.get("author", exercise["author"])
        exercise["authorId"] = existing.get("authorId")
        if not exercise["authorId"]:
            exercise.pop("authorId")

    store.set(f"exercise:{exercise['id']}", exercise)
    return exercise


@exercises_bp.route("", methods=["GET"])
@require_account(functional=True)
def list_exercises(current_user):
    exercises = get_record_store().get_by_prefix("exercise:")
    query = request.args.get("q", "").strip()
    return jsonify(visible_exercises(current_user, exercises, load_users(), query or None)), 200


@exercises_bp.route("", methods=["POST"])
@require_account(functional=True)
def upsert_exercise(current_user):
    body = exercise_schema.load(request.get_json(silent=True) or {})
    exercise = save_exercise(current_user, body)
    return jsonify({"success": True, "exercise": exercise}), 200


@exercises_bp.route("/<exercise_id>", methods=["PUT"])
@require_account(functional=True)
def replace_exercise(exercise_id, current_user):
    body = exercise_schema.load(request.get_json(silent=True) or {})
    body["id"] = exercise_id
    exercise = save_exercise(current_user, body)
    return jsonify({"success": True, "exercise": exercise}), 200


@exercises_bp.route("/<exercise_id>", methods=["DELETE"])
@require_account(functional=True)
def delete_exercise(exercise_id, current_user):
    store = get_record_store()
    existing = store.get(f"exercise:{exercise_id}")
    if existing and not can_manage_exercise(current_user, existing):
        raise Forbidden("Not allowed to delete this exercise")
    store.delete(f"exercise:{exercise_id}")
    return jsonify({"success": True}), 200
