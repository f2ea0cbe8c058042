import pytest

from pixelgym import create_app
from pixelgym.services import get_record_store

PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.extensions["blob_store"].folder = str(tmp_path / "uploads")
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return get_record_store()


class Gym:
    """Drives the API the way the frontend does: sign up, sign in, call endpoints."""

    def __init__(self, client, prefix):
        self.client = client
        self.prefix = prefix
        self.tokens = {}

    def url(self, path):
        return f"{self.prefix}{path}"

    def headers(self, user):
        return {"Authorization": f"Bearer {self.tokens[user['id']]}"}

    def signup(self, name, role="student", password=PASSWORD):
        res = self.client.post(self.url("/signup"), json={"name": name, "password": password, "role": role})
        assert res.status_code == 201, res.get_json()
        return res.get_json()["user"]

    def signin(self, user, password=PASSWORD):
        res = self.client.post(self.url("/signin"), json={"name": user["name"], "password": password})
        assert res.status_code == 200, res.get_json()
        self.tokens[user["id"]] = res.get_json()["session"]["access_token"]
        return res.get_json()

    def get(self, user, path, **kwargs):
        return self.client.get(self.url(path), headers=self.headers(user), **kwargs)

    def post(self, user, path, json=None, **kwargs):
        return self.client.post(self.url(path), json=json, headers=self.headers(user), **kwargs)

    def put(self, user, path, json=None):
        return self.client.put(self.url(path), json=json, headers=self.headers(user))

    def delete(self, user, path):
        return self.client.delete(self.url(path), headers=self.headers(user))

    def admin(self):
        admin = self.signup("iisa", role="coach")
        self.signin(admin)
        return admin

    def coach(self, admin, name):
        coach = self.signup(name, role="coach")
        res = self.post(admin, f"/users/{coach['id']}/status", {"status": "active"})
        assert res.status_code == 200, res.get_json()
        self.signin(coach)
        return res.get_json()["user"]

    def student(self, admin, name, coach=None):
        student = self.signup(name)
        self.post(admin, f"/users/{student['id']}/status", {"status": "active"})
        if coach is not None:
            res = self.post(admin, f"/users/{student['id']}/coach", {"coachId": coach["id"]})
            assert res.status_code == 200, res.get_json()
            student = res.get_json()["user"]
        self.signin(student)
        return student

    def log(self, user, student_id=None, items=None, **extra):
        body = {
            "studentId": student_id or user["id"],
            "items": items or [{"exercise": "Squat", "weight": 60, "reps": 5, "sets": 5, "muscle": "legs"}],
            "notes": "",
        }
        body.update(extra)
        res = self.post(user, "/logs", body)
        assert res.status_code == 200, res.get_json()
        return res.get_json()["log"]


@pytest.fixture
def gym(app, client):
    return Gym(client, app.config["API_PREFIX"])


@pytest.fixture
def cohort(gym):
    """An administrator, two coaches, and students split between them."""
    admin = gym.admin()
    coach_a = gym.coach(admin, "coach_a")
    coach_b = gym.coach(admin, "coach_b")
    alice = gym.student(admin, "alice", coach_a)
    amy = gym.student(admin, "amy", coach_a)
    bob = gym.student(admin, "bob", coach_b)
    return {
        "admin": admin,
        "coach_a": coach_a,
        "coach_b": coach_b,
        "alice": alice,
        "amy": amy,
        "bob": bob,
    }
