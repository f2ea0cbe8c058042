from pixelgym.errors import NotFound
from pixelgym.services import get_record_store

SYSTEM_ACHIEVEMENTS_KEY = "setting:system_achievements"


def load_users():
    return get_record_store().get_by_prefix("user:")


def load_logs():
    return get_record_store().get_by_prefix("log:")


def load_overrides():
    """Threshold overrides for the built-in achievements, keyed by achievement id."""
    return get_record_store().get(SYSTEM_ACHIEVEMENTS_KEY) or {}


def get_or_404(collection, record_id, label):
    record = get_record_store().get(f"{collection}:{record_id}")
    if not record:
        raise NotFound(f"{label} not found")
    return record
