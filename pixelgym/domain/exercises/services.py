"""Wiki entries are private to a coach and that coach's students."""
from pixelgym.domain import new_id
from pixelgym.domain.users.services import coach_of, is_coach, is_student, is_super_admin

DEFAULT_GUIDE = "無介紹"


def authored_by(exercise, coach):
    # Records written before authorId existed only carry the display name.
    if exercise.get("authorId"):
        return exercise["authorId"] == coach.get("id")
    return exercise.get("author") == coach.get("name")


def matches(exercise, query):
    needle = query.lower()
    return any(
        needle in str(exercise.get(field) or "").lower()
        for field in ("name", "muscle", "guide")
    )


def visible_exercises(current_user, exercises, users, query=None):
    if not current_user:
        return []

    if is_super_admin(current_user):
        result = list(exercises)
    elif is_student(current_user):
        coach = coach_of(current_user, users)
        result = [ex for ex in exercises if coach and authored_by(ex, coach)]
    elif is_coach(current_user):
        result = [ex for ex in exercises if authored_by(ex, current_user)]
    else:
        result = []

    if query:
        result = [ex for ex in result if matches(ex, query)]
    return result


def make_exercise(data, author):
    exercise = dict(data)
    exercise["id"] = data.get("id") or new_id()
    exercise["guide"] = data.get("guide") or DEFAULT_GUIDE
    exercise["imageUrl"] = data.get("imageUrl") or ""
    exercise["author"] = author["name"]
    exercise["authorId"] = author["id"]
    return exercise


def can_manage_exercise(current_user, exercise):
    if is_super_admin(current_user):
        return True
    return is_coach(current_user) and authored_by(exercise, current_user)
