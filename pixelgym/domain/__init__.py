import uuid
from datetime import datetime, timezone


def new_id():
    return uuid.uuid4().hex


def utcnow_iso():
    return datetime.now(timezone.utc).isoformat()
