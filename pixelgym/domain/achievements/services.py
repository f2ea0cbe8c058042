"""Badge evaluation, pinning and the admin report card."""
from pixelgym.domain.logs.services import newest_first
from pixelgym.domain.users.services import coach_of

from .schemas import Achievement, CriteriaType, Progress

MAX_PINNED = 3

SYSTEM_ACHIEVEMENTS = (
    Achievement(id="sys_first_log", title="新手上路", description="完成第一次訓練", icon="🏅",
                criteriaType=CriteriaType.log_count, criteriaValue=1),
    Achievement(id="sys_10_logs", title="持之以恆", description="累積 10 次訓練", icon="🥉",
                criteriaType=CriteriaType.log_count, criteriaValue=10),
    Achievement(id="sys_30_logs", title="健身運動員", description="累積 30 次訓練", icon="🥈",
                criteriaType=CriteriaType.log_count, criteriaValue=30),
    Achievement(id="sys_50_logs", title="健身菁英", description="累積 50 次訓練", icon="🥇",
                criteriaType=CriteriaType.log_count, criteriaValue=50),
    Achievement(id="sys_strongman", title="大力士", description="單項重量達 100kg", icon="💪",
                criteriaType=CriteriaType.max_weight, criteriaValue=100),
)
SYSTEM_IDS = {a.id for a in SYSTEM_ACHIEVEMENTS}


class PinRejected(Exception):
    def __init__(self, message, code):
        super().__init__(message)
        self.message = message
        self.code = code


def _as_achievement(achievement):
    if isinstance(achievement, Achievement):
        return achievement
    return Achievement.model_validate(achievement)


def audience_allowed(achievement, coach, users):
    """A coach badge targets everyone or exactly one of the coach's own students."""
    if achievement.targetAudience == "all":
        return True
    student = next((u for u in users if u.get("id") == achievement.targetAudience), None)
    return bool(student) and student.get("coachId") == coach.get("id")


def clean_definitions(coach, definitions):
    """Validate a coach's stored definitions; raise ValueError on the first bad one."""
    cleaned = []
    for data in definitions or []:
        if not isinstance(data, dict):
            raise ValueError("Achievement definitions must be objects")
        achievement = Achievement.model_validate(dict(data, creatorId=coach["id"]))
        if achievement.id in SYSTEM_IDS:
            raise ValueError(f"Achievement id is reserved: {achievement.id}")
        cleaned.append(achievement.model_dump())
    return cleaned


def max_weight(logs, exercise=None):
    heaviest = 0
    for log in logs:
        for item in log.get("items") or []:
            if exercise and item.get("exercise") != exercise:
                continue
            heaviest = max(heaviest, item.get("weight") or 0)
    return heaviest


def evaluate(achievement, logs):
    achievement = _as_achievement(achievement)
    criteria = achievement.criteriaType

    if criteria == CriteriaType.log_count.value:
        current = len(logs)
    elif criteria == CriteriaType.max_weight.value:
        current = max_weight(logs, achievement.criteriaExercise)
    elif criteria == CriteriaType.plan_count.value:
        current = sum(1 for log in logs if log.get("isPlanCompleted") is True)
    else:
        current = sum(log.get("duration") or 0 for log in logs)

    threshold = achievement.criteriaValue
    return Progress(current=current, threshold=threshold, unlocked=current >= threshold)


def system_achievements(overrides=None):
    """Built-in set with any thresholds the super-admin has changed."""
    overrides = overrides or {}
    return [
        a.model_copy(update={"criteriaValue": overrides[a.id]}) if a.id in overrides else a
        for a in SYSTEM_ACHIEVEMENTS
    ]


def coach_achievements(coach, student=None):
    result = []
    for data in (coach or {}).get("definedAchievements") or []:
        achievement = _as_achievement(data)
        if student is None or achievement.targetAudience in ("all", student.get("id")):
            result.append(achievement)
    return result


def achievements_for(student, users, overrides=None):
    return system_achievements(overrides) + coach_achievements(coach_of(student, users), student)


def student_logs(student, logs):
    return [log for log in logs if log.get("studentId") == student.get("id")]


def progress_for(student, logs, users, overrides=None):
    own_logs = student_logs(student, logs)
    result = []
    for achievement in achievements_for(student, users, overrides):
        entry = achievement.model_dump()
        entry.update(evaluate(achievement, own_logs).model_dump())
        result.append(entry)
    return result


def unlocked_ids(student, logs, users, overrides=None):
    return {p["id"] for p in progress_for(student, logs, users, overrides) if p["unlocked"]}


def pin_badge(user, achievement_id, unlocked):
    """Return a copy of ``user`` with the badge pinned, or raise PinRejected."""
    selected = list(user.get("selectedBadgeIds") or [])
    if achievement_id in selected:
        return dict(user, selectedBadgeIds=selected)
    if achievement_id not in unlocked:
        raise PinRejected("Achievement is not unlocked", code="badge_locked")
    if len(selected) >= MAX_PINNED:
        raise PinRejected(f"At most {MAX_PINNED} badges can be pinned", code="badge_limit")
    return dict(user, selectedBadgeIds=selected + [achievement_id])


def unpin_badge(user, achievement_id):
    selected = [b for b in user.get("selectedBadgeIds") or [] if b != achievement_id]
    return dict(user, selectedBadgeIds=selected)


def student_report(student, logs, overrides=None):
    own_logs = newest_first(student_logs(student, logs))
    badges = [
        a for a in system_achievements(overrides)
        if evaluate(a, own_logs).unlocked
    ]
    return {
        "studentId": student["id"],
        "name": student.get("name"),
        "totalWorkouts": len(own_logs),
        "maxWeight": max_weight(own_logs),
        "badges": [{"id": b.id, "title": b.title, "icon": b.icon} for b in badges],
        "lastActive": own_logs[0].get("date") if own_logs else None,
    }
