def create(gym, user, **body):
    body.setdefault("title", "100 burpees")
    body.setdefault("routine", "50 burpees\n\n50 burpees\n")
    res = gym.post(user, "/battles", body)
    assert res.status_code == 201, res.get_json()
    return res.get_json()["battle"]


def test_create_battle(gym, cohort):
    alice = cohort["alice"]
    battle = create(gym, alice, targetStudentId=cohort["amy"]["id"])
    assert battle["routine"] == ["50 burpees", "50 burpees"]
    assert battle["authorId"] == alice["id"]
    assert battle["author"] == "alice"
    assert battle["likes"] == 0


def test_create_battle_validation(gym, cohort):
    alice = cohort["alice"]
    assert gym.post(alice, "/battles", {"title": "x", "routine": "  \n "}).status_code == 400
    assert gym.post(alice, "/battles", {"title": "x", "routine": 5}).status_code == 400
    res = gym.post(alice, "/battles", {"title": "x", "routine": ["a"], "targetStudentId": cohort["coach_a"]["id"]})
    assert res.status_code == 400


def test_modes(gym, cohort):
    alice, amy, bob = cohort["alice"], cohort["amy"], cohort["bob"]
    sent = create(gym, alice, targetStudentId=bob["id"])
    received = create(gym, bob, targetStudentId=alice["id"])
    other = create(gym, amy, routine=["plank"])

    def listed(user, mode):
        res = gym.get(user, "/battles", query_string={"mode": mode})
        assert res.status_code == 200
        return [b["id"] for b in res.get_json()]

    assert listed(alice, "all") == [sent["id"], received["id"], other["id"]]
    assert listed(alice, "sent") == [sent["id"]]
    assert listed(alice, "received") == [received["id"]]
    assert listed(cohort["coach_a"], "sent") == [sent["id"], other["id"]]
    assert listed(cohort["coach_b"], "received") == [sent["id"]]
    assert gym.get(alice, "/battles", query_string={"mode": "mine"}).status_code == 400


def test_like_twice_restores_state(gym, cohort):
    alice = cohort["alice"]
    battle = create(gym, alice)
    liked = gym.post(alice, f"/battles/{battle['id']}/like").get_json()["battle"]
    assert (liked["likes"], liked["likedBy"]) == (1, [alice["id"]])
    unliked = gym.post(alice, f"/battles/{battle['id']}/like").get_json()["battle"]
    assert (unliked["likes"], unliked["likedBy"]) == (0, [])


def test_likes_from_different_users_all_count(gym, cohort, store):
    """Likes go through RecordStore.mutate, so no increment is lost to a later write."""
    battle = create(gym, cohort["alice"])
    for name in ("alice", "amy", "bob", "coach_a"):
        gym.post(cohort[name], f"/battles/{battle['id']}/like")
    stored = store.get(f"battle:{battle['id']}")
    assert stored["likes"] == 4
    assert len(stored["likedBy"]) == 4


def test_comments_append(gym, cohort):
    battle = create(gym, cohort["alice"])
    gym.post(cohort["amy"], f"/battles/{battle['id']}/comments", {"author": "mallory", "content": "go!"})
    res = gym.post(cohort["coach_a"], f"/battles/{battle['id']}/comments", {"content": "  nice  "})
    comments = res.get_json()["battle"]["comments"]
    assert [(c["author"], c["content"]) for c in comments] == [("amy", "go!"), ("coach_a", "nice")]
    assert gym.post(cohort["amy"], f"/battles/{battle['id']}/comments", {"content": "   "}).status_code == 400


def test_record_resubmission_replaces(gym, cohort):
    amy = cohort["amy"]
    battle = create(gym, cohort["alice"])
    gym.post(amy, f"/battles/{battle['id']}/records", {"content": "8 minutes"})
    res = gym.post(amy, f"/battles/{battle['id']}/records",
                   {"studentId": cohort["bob"]["id"], "studentName": "bob", "content": "7 minutes"})
    records = res.get_json()["battle"]["records"]
    assert len(records) == 1
    assert records[0]["content"] == "7 minutes"
    assert records[0]["studentId"] == amy["id"]

    res = gym.post(cohort["coach_a"], f"/battles/{battle['id']}/records", {"content": "6 minutes"})
    assert res.status_code == 403


def test_missing_battle(gym, cohort):
    assert gym.post(cohort["alice"], "/battles/nope/like").status_code == 404


def test_delete_battle(gym, cohort, store):
    battle = create(gym, cohort["alice"])
    assert gym.delete(cohort["amy"], f"/battles/{battle['id']}").status_code == 403
    assert gym.delete(cohort["alice"], f"/battles/{battle['id']}").status_code == 200
    assert gym.delete(cohort["alice"], f"/battles/{battle['id']}").status_code == 200
    assert store.get(f"battle:{battle['id']}") is None
