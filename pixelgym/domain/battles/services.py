"""Battle challenges: filtering by direction and the like/comment/record mutations.

The mutation helpers take a battle dict and return the changed battle, so they
can run inside ``RecordStore.mutate``.
"""
from pixelgym.domain import new_id, utcnow_iso
from pixelgym.domain.users.services import (
    find_user, find_user_by_name, is_coach, is_student, is_super_admin,
)

MODES = ("all", "received", "sent")


def author_of(battle, users):
    if battle.get("authorId"):
        return find_user(users, battle["authorId"])
    return find_user_by_name(users, battle.get("author"))


def visible_battles(current_user, battles, users, mode="all"):
    if mode not in MODES:
        raise ValueError(f"Unknown battle mode: {mode}")
    if mode == "all":
        return list(battles)

    if is_student(current_user):
        if mode == "sent":
            return [b for b in battles if _is_author(b, current_user)]
        return [b for b in battles if b.get("targetStudentId") == current_user["id"]]

    if is_coach(current_user) or is_super_admin(current_user):
        roster = {u["id"] for u in users if u.get("coachId") == current_user["id"]}
        if mode == "sent":
            result = []
            for battle in battles:
                author = author_of(battle, users)
                if author and author.get("id") in roster:
                    result.append(battle)
            return result
        return [b for b in battles if b.get("targetStudentId") in roster]

    return []


def _is_author(battle, user):
    if battle.get("authorId"):
        return battle["authorId"] == user["id"]
    return battle.get("author") == user.get("name")


def new_battle(author, title, routine, target_student_id=None):
    if isinstance(routine, str):
        routine = routine.split("\n")
    battle = {
        "id": new_id(),
        "author": author["name"],
        "authorId": author["id"],
        "title": title,
        "likes": 0,
        "likedBy": [],
        "routine": [line.strip() for line in routine if line and line.strip()],
        "comments": [],
        "records": [],
        "createdAt": utcnow_iso(),
    }
    if target_student_id:
        battle["targetStudentId"] = target_student_id
    return battle


def toggle_like(battle, user_id):
    liked_by = list(battle.get("likedBy") or [])
    likes = battle.get("likes") or 0
    if user_id in liked_by:
        liked_by.remove(user_id)
        likes = max(0, likes - 1)
    else:
        liked_by.append(user_id)
        likes += 1
    battle["likedBy"] = liked_by
    battle["likes"] = likes
    return battle


def add_comment(battle, author, content):
    comment = {
        "id": new_id(),
        "author": author,
        "content": content,
        "date": utcnow_iso(),
    }
    battle["comments"] = list(battle.get("comments") or []) + [comment]
    return battle


def upsert_record(battle, student_id, student_name, content):
    """At most one record per student: a resubmission replaces the old one in place."""
    record = {
        "id": new_id(),
        "studentId": student_id,
        "studentName": student_name,
        "content": content,
        "completedAt": utcnow_iso(),
    }
    records = list(battle.get("records") or [])
    for index, existing in enumerate(records):
        if existing.get("studentId") == student_id:
            records[index] = record
            break
    else:
        records.append(record)
    battle["records"] = records
    return battle


def can_delete_battle(current_user, battle):
    return is_super_admin(current_user) or _is_author(battle, current_user)
