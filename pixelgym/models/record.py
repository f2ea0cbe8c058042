from datetime import datetime
from pixelgym.extensions import db

RECORDS_TABLE = "kv_records"


class Record(db.Model):
    """One JSON object of the key-value store, keyed like ``log:<id>``."""
    __tablename__ = RECORDS_TABLE

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), unique=True, nullable=False, index=True)
    value = db.Column(db.JSON, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f'<Record {self.key}>'
