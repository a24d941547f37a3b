import logging

from util import serialize_data


class ValidationError(ValueError):
    """Caller input broke an invariant. Raised before any state changes."""


class PersistenceError(Exception):
    """A substrate write failed. Reported through StoreResult, never raised by stores."""

    def __init__(self, message, key=None, cause=None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.cause = cause


class StoreResult:
    """
    Outcome of a store mutation.

    snapshot is the state published after the call (it advances even when
    the write failed). value carries the operation's own return, e.g. the
    session user for login or the new Post for create_post.
    """

    def __init__(self, snapshot, value=None, persistence_error=None, changed=True):
        self.snapshot = snapshot
        self.value = value
        self.persistence_error = persistence_error
        self.changed = changed

    @property
    def ok(self):
        return self.persistence_error is None

    def __repr__(self):
        return f"StoreResult(changed={self.changed}, ok={self.ok}, value={self.value!r})"


class Store:
    def __init__(self, substrate):
        self.substrate = substrate
        self.error = None
        self._listeners = []

    @property
    def snapshot(self):
        raise NotImplementedError

    def subscribe(self, listener):
        """
        Registers listener(snapshot, error), called synchronously after
        every publish. Returns a function that unsubscribes it.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snapshot = self.snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot, self.error)
            except Exception:
                logging.exception(f"Listener {listener!r} failed")

    def _reject(self, message):
        self.error = message
        self._notify()
        raise ValidationError(message)

    def _write(self, key, records, failure_message):
        """
        Serializes records and stores them under key; None removes the key.
        Any failure, encoding included, comes back as a PersistenceError.
        """
        try:
            text = serialize_data(records)
            if text is None:
                self.substrate.remove(key)
            else:
                self.substrate.set(key, text)
        except Exception as e:
            logging.error(f"Error saving '{key}': {e}")
            return PersistenceError(failure_message, key=key, cause=e)
        return None

    def _load(self, key, loader, default):
        try:
            raw = self.substrate.get(key)
            if raw is None:
                return default
            return loader(raw)
        except Exception as e:
            logging.error(f"Error loading stored '{key}': {e}")
            return default

    def _publish(self, writes, value=None):
        """
        Attempts each (key, records, failure message) write, then publishes
        the already-applied in-memory state whatever the outcome.
        """
        failure = None
        for key, records, failure_message in writes:
            err = self._write(key, records, failure_message)
            if err is not None and failure is None:
                failure = err
        self.error = failure.message if failure else None
        self._notify()
        return StoreResult(self.snapshot, value=value, persistence_error=failure)

    def _unchanged(self, value=None):
        return StoreResult(self.snapshot, value=value, changed=False)
