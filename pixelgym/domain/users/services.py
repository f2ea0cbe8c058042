"""Account rules shared by every role: super-admin, coach links, login gating."""
from .schemas import UserRole, UserStatus

SUPER_ADMIN_NAME = "iisa"

# Fields only the super-admin may change through a profile upsert.
PROTECTED_FIELDS = ("role", "status", "coachId", "name")

# Fields owned by dedicated endpoints (badge pinning, achievement definitions).
MANAGED_FIELDS = ("selectedBadgeIds", "customBadges", "definedAchievements")


def is_super_admin(user):
    return bool(user) and user.get("name") == SUPER_ADMIN_NAME


def is_coach(user):
    return bool(user) and user.get("role") == UserRole.coach.value


def is_student(user):
    return bool(user) and user.get("role") == UserRole.student.value


def find_user(users, user_id):
    for user in users:
        if user.get("id") == user_id:
            return user
    return None


def find_user_by_name(users, name):
    for user in users:
        if user.get("name") == name:
            return user
    return None


def coach_of(student, users):
    coach_id = (student or {}).get("coachId")
    if not coach_id:
        return None
    return find_user(users, coach_id)


def students_of(coach, users):
    return [u for u in users if coach.get("id") and u.get("coachId") == coach["id"]]


def is_fully_functional(user, users):
    """A student needs an active account and a coach that is not disabled."""
    if is_super_admin(user) or not is_student(user):
        return True
    if user.get("status") != UserStatus.active.value:
        return False
    coach = coach_of(user, users)
    return coach is not None and coach.get("status") != UserStatus.disabled.value


def login_block_reason(user):
    """Return an error code when ``user`` may not sign in, else None."""
    if is_super_admin(user):
        return None
    if user.get("status") == UserStatus.disabled.value:
        return "account_disabled"
    if user.get("status") == UserStatus.pending.value and is_coach(user):
        return "coach_pending"
    return None


def new_profile(user_id, name, role):
    return {
        "id": user_id,
        "name": name,
        "role": role,
        "status": UserStatus.active.value if name == SUPER_ADMIN_NAME else UserStatus.pending.value,
        "coachId": "",
    }


def visible_users(current_user, users):
    """Profiles the caller may list.

    The super-admin sees everyone. A coach sees themselves and their roster.
    A student sees themselves, their coach and the peers sharing that coach.
    """
    if is_super_admin(current_user):
        return list(users)

    if is_coach(current_user):
        return [u for u in users if u.get("id") == current_user["id"] or u.get("coachId") == current_user["id"]]

    coach_id = current_user.get("coachId")
    return [
        u for u in users
        if u.get("id") == current_user["id"]
        or (coach_id and (u.get("id") == coach_id or u.get("coachId") == coach_id))
    ]


def protected_changes(existing, incoming):
    """Names of protected or managed fields that ``incoming`` would change on ``existing``."""
    changed = []
    for field in PROTECTED_FIELDS + MANAGED_FIELDS:
        if field in incoming and incoming.get(field) != existing.get(field):
            changed.append(field)
    return changed


def keep_protected(existing, incoming):
    """Copy of ``incoming`` with every protected or managed field taken from ``existing``.

    A profile upsert replaces the whole object, so a field left out of the
    body would otherwise be dropped.
    """
    profile = dict(incoming)
    for field in PROTECTED_FIELDS + MANAGED_FIELDS:
        if field in existing:
            profile[field] = existing[field]
        else:
            profile.pop(field, None)
    return profile
