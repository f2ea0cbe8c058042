import copy

from flask import current_app
from pixelgym.extensions import db
from pixelgym.models import Record


class RecordStore:
    """Key-value store of whole JSON objects on top of the ``kv_records`` table.

    Every ``set`` is a full-object upsert. ``get_by_prefix`` returns objects in
    insertion order. ``mutate`` is the only read-modify-write primitive: it
    locks the row for the duration of the transaction so concurrent callers
    apply their changes one after another instead of overwriting each other.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    def _find(self, key, for_update=False):
        stmt = db.select(Record).filter_by(key=key)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    def get(self, key):
        record = self._find(key)
        return copy.deepcopy(record.value) if record else None

    def set(self, key, value):
        record = self._find(key)
        if record is None:
            self.session.add(Record(key=key, value=copy.deepcopy(value)))
        else:
            record.value = copy.deepcopy(value)
        self.session.commit()
        return value

    def get_by_prefix(self, prefix):
        stmt = (
            db.select(Record)
            .filter(Record.key.startswith(prefix, autoescape=True))
            .order_by(Record.id)
        )
        return [copy.deepcopy(r.value) for r in self.session.execute(stmt).scalars()]

    def delete(self, key):
        record = self._find(key)
        if record is not None:
            self.session.delete(record)
            self.session.commit()

    def mutate(self, key, fn):
        """Apply ``fn`` to the stored object under a row lock and persist the result.

        Returns the new value, or None when the key does not exist.
        """
        record = self._find(key, for_update=True)
        if record is None:
            self.session.rollback()
            return None
        try:
            value = fn(copy.deepcopy(record.value))
            record.value = value
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        current_app.logger.debug(f"Mutated record {key}")
        return copy.deepcopy(value)


def get_record_store():
    return current_app.extensions["record_store"]
