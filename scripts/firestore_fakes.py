"""In-memory stand-in for the slice of the Firestore client the backend uses.

Supports collection/document CRUD, add(), chained where/order_by/limit
(positional or FieldFilter), stream() and on_snapshot() watches that
re-deliver the full result set after every write to the collection.
"""
import itertools
import operator
from datetime import datetime, timezone

_OPS = {
    "==": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "in": lambda a, b: a in b,
}

_ids = itertools.count(1)


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self._collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self.id, self._collection._docs.get(self.id))

    def set(self, data, merge=False):
        if merge and self.id in self._collection._docs:
            self._collection._docs[self.id].update(data)
        else:
            self._collection._docs[self.id] = dict(data)
        self._collection._notify()

    def update(self, data):
        if self.id not in self._collection._docs:
            raise KeyError(f"No document to update: {self.id}")
        self._collection._docs[self.id].update(data)
        self._collection._notify()

    def delete(self):
        self._collection._docs.pop(self.id, None)
        self._collection._notify()


class FakeWatch:
    def __init__(self, collection, query, callback):
        self._collection = collection
        self.query = query
        self.callback = callback
        self.active = True

    def fire(self):
        if self.active:
            self.callback(self.query._snapshots(), [], datetime.now(timezone.utc))

    def unsubscribe(self):
        self.active = False
        if self in self._collection._watches:
            self._collection._watches.remove(self)


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, max_items=None):
        self._collection = collection
        self._filters = list(filters)
        self._order = order
        self._limit = max_items

    def where(self, field=None, op=None, value=None, *, filter=None):
        if filter is not None:
            field, op, value = filter.field_path, filter.op_string, filter.value
        return FakeQuery(self._collection, self._filters + [(field, op, value)], self._order, self._limit)

    def order_by(self, field, direction="ASCENDING"):
        return FakeQuery(self._collection, self._filters, (field, direction), self._limit)

    def limit(self, count):
        return FakeQuery(self._collection, self._filters, self._order, count)

    def _snapshots(self):
        rows = []
        for doc_id, data in self._collection._docs.items():
            ok = True
            for field, op, value in self._filters:
                if field not in data or not _OPS[op](data[field], value):
                    ok = False
                    break
            if ok:
                rows.append(FakeSnapshot(doc_id, dict(data)))
        if self._order is not None:
            field, direction = self._order
            rows.sort(
                key=lambda s: s.to_dict().get(field),
                reverse=str(direction).upper() == "DESCENDING",
            )
        if self._limit is not None:
            rows = rows[: self._limit]
        return rows

    def stream(self):
        return iter(self._snapshots())

    def on_snapshot(self, callback):
        watch = FakeWatch(self._collection, self, callback)
        self._collection._watches.append(watch)
        watch.fire()
        return watch


class FakeCollection(FakeQuery):
    def __init__(self, name):
        self.name = name
        self._docs = {}
        self._watches = []
        super().__init__(self)

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or f"{self.name}-{next(_ids)}")

    def add(self, data):
        ref = self.document()
        ref.set(data)
        return datetime.now(timezone.utc), ref

    def _notify(self):
        for watch in list(self._watches):
            watch.fire()


class FakeFirestore:
    def __init__(self):
        self._collections = {}

    def collection(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]
