from flask import Blueprint, request, jsonify, current_app

from pixelgym.domain import new_id, utcnow_iso
from pixelgym.domain.logs.services import (
    apply_feedback, assign_plan, can_delete_log, can_write_log, complete_plan,
    is_coach_of_owner, make_log_item, peers_of, share_log, visible_logs,
)
from pixelgym.domain.users.services import is_coach, is_super_admin, students_of
from pixelgym.errors import BadRequest, Forbidden, NotFound
from pixelgym.schemas import (
    CompletePlanSchema, FeedbackSchema, LogSchema, PlanAssignSchema, ShareSchema,
)
from pixelgym.services import get_record_store
from pixelgym.utils.decorators import require_account
from pixelgym.utils.records import get_or_404, load_logs, load_users

logs_bp = Blueprint("logs", __name__)
log_schema = LogSchema()
log_patch_schema = LogSchema(partial=True)
plan_assign_schema = PlanAssignSchema()
complete_plan_schema = CompletePlanSchema()
share_schema = ShareSchema()
feedback_schema = FeedbackSchema()


def get_log_or_404(log_id):
    return get_or_404("log", log_id, "Log")


def require_log_coach(current_user, log, users):
    if is_super_admin(current_user):
        return
    if not (is_coach(current_user) and is_coach_of_owner(current_user, log, users)):
        raise Forbidden("Only the student's coach can do this")


@logs_bp.route("", methods=["GET"])
@require_account(functional=True)
def list_logs(current_user):
    logs = visible_logs(
        current_user,
        load_logs(),
        load_users(),
        viewing_student_id=request.args.get("studentId"),
        scope=request.args.get("scope", "my"),
    )
    return jsonify(logs), 200


@logs_bp.route("", methods=["POST"])
@require_account(functional=True)
def upsert_log(current_user):
    body = log_schema.load(request.get_json(silent=True) or {})
    body["id"] = body.get("id") or new_id()
    body["date"] = body.get("date") or utcnow_iso()
    body["items"] = [make_log_item(item) for item in body["items"]]

    users = load_users()
    store = get_record_store()
    existing = store.get(f"log:{body['id']}")
    if not can_write_log(current_user, body, users) or (
        existing and not can_write_log(current_user, existing, users)
    ):
        raise Forbidden("Not allowed to write this log")

    store.set(f"log:{body['id']}", body)
    return jsonify({"success": True, "log": body}), 200


@logs_bp.route("/<log_id>", methods=["PUT"])
@require_account(functional=True)
def update_log(log_id, current_user):
    """Shallow merge of the body into the stored log."""
    body = log_patch_schema.load(request.get_json(silent=True) or {})
    body.pop("id", None)
    if "items" in body:
        body["items"] = [make_log_item(item) for item in body["items"]]

    existing = get_log_or_404(log_id)
    users = load_users()
    if not can_write_log(current_user, existing, users):
        raise Forbidden("Not allowed to write this log")
    if "studentId" in body and body["studentId"] != existing.get("studentId") and not is_super_admin(current_user):
        raise Forbidden("Not allowed to move this log")

    updated = get_record_store().mutate(f"log:{log_id}", lambda log: {**log, **body})
    if updated is None:
        raise NotFound("Log not found")
    return jsonify({"success": True, "log": updated}), 200


@logs_bp.route("/<log_id>", methods=["DELETE"])
@require_account(functional=True)
def delete_log(log_id, current_user):
    store = get_record_store()
    existing = store.get(f"log:{log_id}")
    if existing and not can_delete_log(current_user, existing):
        raise Forbidden("Not allowed to delete this log")
    store.delete(f"log:{log_id}")
    return jsonify({"success": True}), 200


@logs_bp.route("/plans", methods=["POST"])
@require_account(functional=True)
def create_plans(current_user):
    """Assign one plan to several students as independent records."""
    if not (is_coach(current_user) or is_super_admin(current_user)):
        raise Forbidden("Only coaches can assign plans")
    data = plan_assign_schema.load(request.get_json(silent=True) or {})

    users = load_users()
    if not is_super_admin(current_user):
        roster = {u["id"] for u in students_of(current_user, users)}
        outsiders = [s for s in data["studentIds"] if s not in roster]
        if outsiders:
            raise Forbidden(f"Not your students: {', '.join(outsiders)}")

    store = get_record_store()
    plans = assign_plan(data["studentIds"], data["items"], data["notes"], data["date"])
    for plan in plans:
        store.set(f"log:{plan['id']}", plan)
    current_app.logger.info(f"{current_user['name']} assigned a plan to {len(plans)} students")
    return jsonify({"success": True, "logs": plans}), 201


@logs_bp.route("/<log_id>/complete", methods=["POST"])
@require_account(functional=True)
def complete(log_id, current_user):
    data = complete_plan_schema.load(request.get_json(silent=True) or {})
    log = get_log_or_404(log_id)
    if log.get("studentId") != current_user["id"]:
        raise Forbidden("Only the assigned student can complete this plan")
    if not log.get("isPlan"):
        raise BadRequest("Log is not a plan")

    completed = complete_plan(log, data["items"], data["notes"], data["date"], data["duration"])
    get_record_store().set(f"log:{log_id}", completed)
    return jsonify({"success": True, "log": completed}), 200


@logs_bp.route("/<log_id>/share", methods=["POST"])
@require_account(functional=True)
def share(log_id, current_user):
    data = share_schema.load(request.get_json(silent=True) or {})
    log = get_log_or_404(log_id)
    if log.get("studentId") != current_user["id"]:
        raise Forbidden("Only the owner can share this log")

    peers = {u["id"] for u in peers_of(current_user, load_users())}
    recipients = data["studentIds"] if data["studentIds"] is not None else sorted(peers)
    strangers = [r for r in recipients if r not in peers]
    if strangers:
        raise BadRequest(f"Not classmates: {', '.join(strangers)}")

    source, copies = share_log(log, recipients)
    store = get_record_store()
    store.set(f"log:{log_id}", source)
    for copy in copies:
        store.set(f"log:{copy['id']}", copy)
    return jsonify({"success": True, "log": source, "copies": copies}), 201


@logs_bp.route("/<log_id>/feedback", methods=["POST"])
@require_account(functional=True)
def feedback(log_id, current_user):
    data = feedback_schema.load(request.get_json(silent=True) or {})
    log = get_log_or_404(log_id)
    require_log_coach(current_user, log, load_users())

    updated = apply_feedback(log, current_user, data["score"], data["coachComment"])
    get_record_store().set(f"log:{log_id}", updated)
    return jsonify({"success": True, "log": updated}), 200


@logs_bp.route("/<log_id>/hide", methods=["POST"])
@require_account(functional=True)
def toggle_hidden(log_id, current_user):
    log = get_log_or_404(log_id)
    require_log_coach(current_user, log, load_users())

    def apply(stored):
        stored["isHidden"] = not stored.get("isHidden")
        return stored

    updated = get_record_store().mutate(f"log:{log_id}", apply)
    return jsonify({"success": True, "log": updated}), 200
