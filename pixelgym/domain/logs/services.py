"""Workout logs: who sees what, and how plans and shares become records."""
from datetime import datetime, timezone

from pixelgym.domain import new_id, utcnow_iso
from pixelgym.domain.users.services import (
    find_user, is_coach, is_student, is_super_admin, students_of,
)

DEFAULT_MUSCLE = "全身"


def parse_date(value):
    """Timestamp used for ordering. Unparseable or missing dates sort last."""
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except (TypeError, ValueError):
            return float("-inf")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def newest_first(logs):
    # sorted() is stable, so logs with the same date keep store order
    return sorted(logs, key=lambda log: parse_date(log.get("date")), reverse=True)


def visible_logs(current_user, logs, users, viewing_student_id=None, scope="my"):
    if not current_user:
        return []

    if is_student(current_user):
        coach_id = current_user.get("coachId")
        peer_ids = {
            u["id"] for u in users
            if coach_id and u.get("coachId") == coach_id
        }
        result = [
            log for log in logs
            if log.get("studentId") == current_user["id"]
            or (log.get("isShared") and log.get("studentId") in peer_ids)
        ]
    elif is_super_admin(current_user) and scope == "all":
        result = list(logs)
    else:
        roster = {u["id"] for u in students_of(current_user, users)}
        result = [log for log in logs if log.get("studentId") in roster]

    if viewing_student_id:
        result = [log for log in result if log.get("studentId") == viewing_student_id]

    return newest_first(result)


def _number(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(number) if number.is_integer() else number


def make_log_item(data):
    return {
        "id": data.get("id") or new_id(),
        "exercise": data.get("exercise", ""),
        "weight": _number(data.get("weight")),
        "reps": _number(data.get("reps")),
        "sets": _number(data.get("sets")),
        "muscle": data.get("muscle") or DEFAULT_MUSCLE,
    }


def new_log(student_id, items, notes="", date=None, **extra):
    log = {
        "id": new_id(),
        "studentId": student_id,
        "date": date or utcnow_iso(),
        "items": [make_log_item(item) for item in items],
        "notes": notes or "",
        "isHidden": False,
    }
    log.update(extra)
    return log


def assign_plan(student_ids, items, notes="", date=None):
    """One independent plan record per student; no record is shared."""
    items = [make_log_item(item) for item in items]
    return [
        new_log(student_id, [dict(item) for item in items], notes, date, isPlan=True)
        for student_id in student_ids
    ]


def complete_plan(log, items, notes="", date=None, duration=None):
    completed = dict(log)
    completed.update(
        items=[make_log_item(item) for item in items],
        notes=notes or "",
        date=date or utcnow_iso(),
        isPlan=False,
        isPlanCompleted=True,
    )
    if duration is not None:
        completed["duration"] = _number(duration)
    return completed


def share_log(log, recipient_ids):
    """Mark ``log`` shared and copy it to each recipient as a plan."""
    source = dict(log, isShared=True)
    copies = []
    for recipient_id in recipient_ids:
        if recipient_id == log.get("studentId"):
            continue
        copies.append(new_log(
            recipient_id,
            log.get("items", []),
            log.get("notes", ""),
            isPlan=True,
            sharedFrom=log.get("studentId"),
        ))
    return source, copies


def peers_of(student, users):
    coach_id = student.get("coachId")
    if not coach_id:
        return []
    return [
        u for u in users
        if u.get("coachId") == coach_id and u.get("id") != student.get("id") and is_student(u)
    ]


def apply_feedback(log, coach, score=None, comment=""):
    updated = dict(log)
    updated.update(
        score=score,
        coachComment=comment or "",
        coachIdWhoCommented=coach["id"],
        coachCommentDate=utcnow_iso(),
    )
    return updated


def is_coach_of_owner(current_user, log, users):
    owner = find_user(users, log.get("studentId"))
    return bool(owner) and owner.get("coachId") == current_user.get("id")


def can_write_log(current_user, log, users):
    if is_super_admin(current_user):
        return True
    if is_student(current_user):
        return log.get("studentId") == current_user["id"]
    return is_coach(current_user) and is_coach_of_owner(current_user, log, users)


def can_delete_log(current_user, log):
    """Any coach or the owning student may delete."""
    return (
        is_super_admin(current_user)
        or is_coach(current_user)
        or log.get("studentId") == current_user.get("id")
    )
