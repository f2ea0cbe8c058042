from flask import Blueprint, request, jsonify

from pixelgym.domain.battles.services import (
    MODES, add_comment, can_delete_battle, new_battle, toggle_like, upsert_record, visible_battles,
)
from pixelgym.domain.users.services import find_user, is_student
from pixelgym.errors import BadRequest, Forbidden, NotFound
from pixelgym.schemas import BattleRecordSchema, BattleSchema, CommentSchema
from pixelgym.services import get_record_store
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import load_users

battles_bp = Blueprint("battles", __name__)
battle_schema = BattleSchema()
comment_schema = CommentSchema()
record_schema = BattleRecordSchema()


def mutate_battle(battle_id, fn):
    battle = get_record_store().mutate(f"battle:{battle_id}", fn)
    if battle is None:
        raise NotFound("Battle not found")
    return battle


@battles_bp.route("", methods=["GET"])
@require_account(functional=True)
def list_battles(current_user):
    mode = request.args.get("mode", "all")
    if mode not in MODES:
        raise BadRequest(f"mode must be one of: {', '.join(MODES)}")
    battles = get_record_store().get_by_prefix("battle:")
    return jsonify(visible_battles(current_user, battles, load_users(), mode)), 200


@battles_bp.route("", methods=["POST"])
@require_account(functional=True)
def create_battle(current_user):
    data = battle_schema.load(request.get_json(silent=True) or {})
    routine = data["routine"]
    if not isinstance(routine, (str, list)):
        raise BadRequest("routine must be text or a list of lines")

    target = data["targetStudentId"]
    if target and target != "all":
        student = find_user(load_users(), target)
        if not student or not is_student(student):
            raise BadRequest("Target student not found")

    battle = new_battle(current_user, data["title"], routine, target)
    if not battle["routine"]:
        raise BadRequest("routine must not be empty")

    get_record_store().set(f"battle:{battle['id']}", battle)
    return jsonify({"success": True, "battle": battle}), 201


@battles_bp.route("/<battle_id>", methods=["DELETE"])
@require_account(functional=True)
def delete_battle(battle_id, current_user):
    store = get_record_store()
    existing = store.get(f"battle:{battle_id}")
    if existing and not can_delete_battle(current_user, existing):
        raise Forbidden("Only the author can delete this battle")
    store.delete(f"battle:{battle_id}")
    return jsonify({"success": True}), 200


@battles_bp.route("/<battle_id>/like", methods=["POST"])
@require_account(functional=True)
def like(battle_id, current_user):
    battle = mutate_battle(battle_id, lambda b: toggle_like(b, current_user["id"]))
    return jsonify({"success": True, "battle": battle}), 200


@battles_bp.route("/<battle_id>/comments", methods=["POST"])
@require_account(functional=True)
def comment(battle_id, current_user):
    data = comment_schema.load(request.get_json(silent=True) or {})
    content = data["content"].strip()
    if not content:
        raise BadRequest("Comment must not be empty")
    battle = mutate_battle(battle_id, lambda b: add_comment(b, current_user["name"], content))
    return jsonify({"success": True, "battle": battle}), 200


@battles_bp.route("/<battle_id>/records", methods=["POST"])
@require_account(functional=True)
def submit_record(battle_id, current_user):
    if not is_student(current_user):
        raise Forbidden("Only students can submit battle records")
    data = record_schema.load(request.get_json(silent=True) or {})
    battle = mutate_battle(
        battle_id,
        lambda b: upsert_record(b, current_user["id"], current_user["name"], data["content"]),
    )
    return jsonify({"success": True, "battle": battle}), 200
