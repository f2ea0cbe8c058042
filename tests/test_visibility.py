import pytest

from pixelgym.domain.battles.services import visible_battles
from pixelgym.domain.exercises.services import visible_exercises
from pixelgym.domain.logs.services import visible_logs
from pixelgym.domain.users.services import visible_users

ADMIN = {"id": "admin", "name": "iisa", "role": "coach", "status": "active"}
COACH_A = {"id": "ca", "name": "Coach A", "role": "coach", "status": "active"}
COACH_B = {"id": "cb", "name": "Coach B", "role": "coach", "status": "active"}
ALICE = {"id": "alice", "name": "alice", "role": "student", "status": "active", "coachId": "ca"}
AMY = {"id": "amy", "name": "amy", "role": "student", "status": "active", "coachId": "ca"}
BOB = {"id": "bob", "name": "bob", "role": "student", "status": "active", "coachId": "cb"}
LONER = {"id": "loner", "name": "loner", "role": "student", "status": "active", "coachId": ""}
USERS = [ADMIN, COACH_A, COACH_B, ALICE, AMY, BOB, LONER]


def log(log_id, student_id, date, **extra):
    return dict({"id": log_id, "studentId": student_id, "date": date, "items": []}, **extra)


LOGS = [
    log("a1", "alice", "2024-01-01T08:00:00Z"),
    log("a2", "alice", "2024-03-01T08:00:00Z"),
    log("m1", "amy", "2024-02-01T08:00:00Z", isShared=True),
    log("m2", "amy", "2024-02-15T08:00:00Z"),
    log("b1", "bob", "2024-02-10T08:00:00Z", isShared=True),
]


def ids(records):
    return [r["id"] for r in records]


class TestLogVisibility:
    def test_student_sees_own_and_peer_shared_logs_newest_first(self):
        assert ids(visible_logs(ALICE, LOGS, USERS)) == ["a2", "m1", "a1"]

    def test_student_never_sees_other_cohort(self):
        visible = visible_logs(ALICE, LOGS, USERS)
        assert "b1" not in ids(visible)
        assert all(entry["studentId"] in {"alice", "amy"} for entry in visible)

    def test_student_without_coach_sees_only_own(self):
        logs = LOGS + [log("l1", "loner", "2024-01-05")]
        assert ids(visible_logs(LONER, logs, USERS)) == ["l1"]

    def test_coach_sees_exactly_own_roster(self):
        assert set(ids(visible_logs(COACH_A, LOGS, USERS))) == {"a1", "a2", "m1", "m2"}
        assert ids(visible_logs(COACH_B, LOGS, USERS)) == ["b1"]

    def test_coach_drill_down_to_one_student(self):
        assert ids(visible_logs(COACH_A, LOGS, USERS, viewing_student_id="amy")) == ["m2", "m1"]

    def test_drill_down_cannot_escape_roster(self):
        assert visible_logs(COACH_A, LOGS, USERS, viewing_student_id="bob") == []

    def test_admin_acts_as_coach_unless_scope_all(self):
        users = USERS + [{"id": "s9", "name": "s9", "role": "student", "coachId": "admin"}]
        logs = LOGS + [log("s9log", "s9", "2024-01-01")]
        assert ids(visible_logs(ADMIN, logs, users)) == ["s9log"]
        assert len(visible_logs(ADMIN, logs, users, scope="all")) == len(logs)

    def test_equal_dates_keep_store_order(self):
        logs = [log(str(i), "alice", "2024-05-05T10:00:00Z") for i in range(5)]
        assert ids(visible_logs(ALICE, logs, USERS)) == ["0", "1", "2", "3", "4"]

    def test_no_current_user(self):
        assert visible_logs(None, LOGS, USERS) == []


EXERCISES = [
    {"id": "e1", "name": "Bench Press", "muscle": "chest", "guide": "Lower slowly", "author": "Coach A"},
    {"id": "e2", "name": "Deadlift", "muscle": "back", "guide": "Neutral spine", "author": "Coach A", "authorId": "ca"},
    {"id": "e3", "name": "Row", "muscle": "back", "guide": "Squeeze", "author": "Coach B", "authorId": "cb"},
]


class TestExerciseVisibility:
    def test_student_sees_assigned_coach_entries(self):
        assert ids(visible_exercises(ALICE, EXERCISES, USERS)) == ["e1", "e2"]

    def test_student_without_coach_sees_nothing(self):
        assert visible_exercises(LONER, EXERCISES, USERS) == []

    def test_coach_sees_only_own(self):
        assert ids(visible_exercises(COACH_B, EXERCISES, USERS)) == ["e3"]

    def test_author_id_wins_over_display_name(self):
        impostor = {"id": "cx", "name": "Coach A", "role": "coach", "status": "active"}
        # the legacy entry matches by name, the keyed one does not
        assert ids(visible_exercises(impostor, EXERCISES, USERS + [impostor])) == ["e1"]

    @pytest.mark.parametrize("query, expected", [
        ("BACK", ["e2"]),
        ("lower", ["e1"]),
        ("dead", ["e2"]),
        ("row", []),
    ])
    def test_search_after_role_filter(self, query, expected):
        assert ids(visible_exercises(ALICE, EXERCISES, USERS, query)) == expected


BATTLES = [
    {"id": "x1", "author": "alice", "authorId": "alice", "targetStudentId": "bob"},
    {"id": "x2", "author": "bob", "targetStudentId": "alice"},
    {"id": "x3", "author": "Coach A", "authorId": "ca", "targetStudentId": "all"},
    {"id": "x4", "author": "amy", "targetStudentId": "amy"},
]


class TestBattleVisibility:
    def test_all_mode_is_unfiltered(self):
        assert ids(visible_battles(ALICE, BATTLES, USERS, "all")) == ["x1", "x2", "x3", "x4"]

    def test_student_sent_and_received(self):
        assert ids(visible_battles(ALICE, BATTLES, USERS, "sent")) == ["x1"]
        assert ids(visible_battles(ALICE, BATTLES, USERS, "received")) == ["x2"]

    def test_coach_sent_matches_roster_authors(self):
        # x4 has no authorId and is resolved through the author's name
        assert ids(visible_battles(COACH_A, BATTLES, USERS, "sent")) == ["x1", "x4"]
        assert ids(visible_battles(COACH_B, BATTLES, USERS, "sent")) == ["x2"]

    def test_coach_received_targets_roster(self):
        assert ids(visible_battles(COACH_A, BATTLES, USERS, "received")) == ["x2", "x4"]

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            visible_battles(ALICE, BATTLES, USERS, "mine")


class TestUserVisibility:
    def test_student_sees_self_coach_and_peers(self):
        assert ids(visible_users(ALICE, USERS)) == ["ca", "alice", "amy"]

    def test_coach_sees_self_and_roster(self):
        assert ids(visible_users(COACH_B, USERS)) == ["cb", "bob"]

    def test_admin_sees_everyone(self):
        assert len(visible_users(ADMIN, USERS)) == len(USERS)
