def add(gym, coach, **body):
    body.setdefault("name", "Bench Press")
    body.setdefault("muscle", "chest")
    res = gym.post(coach, "/exercises", body)
    assert res.status_code == 200, res.get_json()
    return res.get_json()["exercise"]


def names(response):
    return [e["name"] for e in response.get_json()]


def test_create_sets_author_and_defaults(gym, cohort):
    coach = cohort["coach_a"]
    exercise = add(gym, coach)
    assert exercise["author"] == "coach_a"
    assert exercise["authorId"] == coach["id"]
    assert exercise["guide"] == "無介紹"
    assert exercise["id"]


def test_students_cannot_edit_wiki(gym, cohort):
    res = gym.post(cohort["alice"], "/exercises", {"name": "Curl", "muscle": "arms"})
    assert res.status_code == 403


def test_wiki_is_private_per_coach(gym, cohort):
    add(gym, cohort["coach_a"], name="Squat", muscle="legs")
    add(gym, cohort["coach_b"], name="Row", muscle="back")

    assert names(gym.get(cohort["alice"], "/exercises")) == ["Squat"]
    assert names(gym.get(cohort["bob"], "/exercises")) == ["Row"]
    assert names(gym.get(cohort["coach_a"], "/exercises")) == ["Squat"]
    assert names(gym.get(cohort["admin"], "/exercises")) == ["Squat", "Row"]


def test_search(gym, cohort):
    add(gym, cohort["coach_a"], name="Squat", muscle="legs", guide="Keep knees out")
    add(gym, cohort["coach_a"], name="Deadlift", muscle="back")
    alice = cohort["alice"]
    assert names(gym.get(alice, "/exercises", query_string={"q": "KNEES"})) == ["Squat"]
    assert names(gym.get(alice, "/exercises", query_string={"q": "back"})) == ["Deadlift"]
    assert names(gym.get(alice, "/exercises", query_string={"q": "  "})) == ["Squat", "Deadlift"]


def test_replace_and_ownership(gym, cohort, store):
    exercise = add(gym, cohort["coach_a"], level=2)
    res = gym.put(cohort["coach_a"], f"/exercises/{exercise['id']}", {"name": "Incline Press", "muscle": "chest"})
    assert res.status_code == 200
    stored = store.get(f"exercise:{exercise['id']}")
    assert stored["name"] == "Incline Press"
    assert "level" not in stored

    res = gym.put(cohort["coach_b"], f"/exercises/{exercise['id']}", {"name": "Mine", "muscle": "chest"})
    assert res.status_code == 403


def test_admin_edit_keeps_author(gym, cohort, store):
    exercise = add(gym, cohort["coach_a"])
    gym.put(cohort["admin"], f"/exercises/{exercise['id']}", {"name": "Fixed", "muscle": "chest"})
    stored = store.get(f"exercise:{exercise['id']}")
    assert stored["authorId"] == cohort["coach_a"]["id"]
    assert names(gym.get(cohort["alice"], "/exercises")) == ["Fixed"]


def test_validation(gym, cohort):
    coach = cohort["coach_a"]
    assert gym.post(coach, "/exercises", {"name": "", "muscle": "legs"}).status_code == 400
    assert gym.post(coach, "/exercises", {"name": "Squat", "muscle": "legs", "level": 9}).status_code == 400


def test_delete(gym, cohort, store):
    exercise = add(gym, cohort["coach_a"])
    assert gym.delete(cohort["coach_b"], f"/exercises/{exercise['id']}").status_code == 403
    assert gym.delete(cohort["coach_a"], f"/exercises/{exercise['id']}").status_code == 200
    assert gym.delete(cohort["coach_a"], f"/exercises/{exercise['id']}").status_code == 200
    assert store.get(f"exercise:{exercise['id']}") is None
