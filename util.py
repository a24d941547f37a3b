import json
import time
import uuid


def generate_id():
    return str(uuid.uuid4())


class MonotonicClock:
    """
    Wall-clock milliseconds that never go backwards within one process.
    Two calls in the same millisecond return distinct, increasing values.
    """
    def __init__(self):
        self._last = 0

    def __call__(self):
        now = int(time.time() * 1000)
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return now


now_ms = MonotonicClock()


def toggle_membership(items, item):
    """
    Returns a new tuple with item removed if present, appended otherwise.
    Duplicates in the input collapse to one entry.
    """
    if item in items:
        return tuple(i for i in items if i != item)
    return unique(items) + (item,)


def unique(items):
    seen = set()
    result = []
    for i in items:
        if i not in seen:
            seen.add(i)
            result.append(i)
    return tuple(result)


def serialize_data(records):
    """
    Serializes a list of records (or a single record) to the text stored
    in the substrate.
    """
    if records is None:
        return None
    if isinstance(records, (list, tuple)):
        return json.dumps([r.to_dict() for r in records])
    return json.dumps(records.to_dict())


def deserialize_data(encoded_data, record_cls, many=True):
    """
    Deserializes substrate text back into records.
    Returns an empty tuple (or None when many is False) for missing data.
    """
    if not encoded_data:
        return () if many else None
    data = json.loads(encoded_data)
    if many:
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of {record_cls.__name__} records")
        return tuple(record_cls.from_dict(d) for d in data)
    if data is None:
        return None
    return record_cls.from_dict(data)
