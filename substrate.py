import os
import logging

USERS_KEY = "users"
CURRENT_USER_KEY = "currentUser"
POSTS_KEY = "posts"

STORAGE_KEYS = (USERS_KEY, CURRENT_USER_KEY, POSTS_KEY)


class SubstrateError(Exception):
    pass


class SubstrateQuotaError(SubstrateError):
    pass


class Substrate:
    """
    Durable, synchronous, string-keyed map backing both stores.

    Writes may raise (quota, I/O). Callers must not assume a failed write
    left anything behind.
    """

    def __init__(self, quota_bytes=None):
        self.quota_bytes = quota_bytes

    def get(self, key):
        raise NotImplementedError

    def set(self, key, value):
        raise NotImplementedError

    def remove(self, key):
        raise NotImplementedError

    def keys(self):
        raise NotImplementedError

    def used_bytes(self, excluding=None):
        total = 0
        for k in self.keys():
            if k == excluding:
                continue
            value = self.get(k)
            if value is not None:
                total += len(k.encode("utf-8")) + len(value.encode("utf-8"))
        return total

    def check_quota(self, key, value):
        if not self.quota_bytes:
            return
        needed = self.used_bytes(excluding=key) + len(key.encode("utf-8")) + len(value.encode("utf-8"))
        if needed > self.quota_bytes:
            raise SubstrateQuotaError(
                f"Writing '{key}' needs {needed} bytes, quota is {self.quota_bytes}"
            )


class MemorySubstrate(Substrate):
    """In-process substrate, used by tests and throwaway sessions."""

    def __init__(self, initial=None, quota_bytes=None):
        super().__init__(quota_bytes)
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        if not isinstance(value, str):
            raise SubstrateError(f"Value for '{key}' must be a string")
        self.check_quota(key, value)
        self._data[key] = value

    def remove(self, key):
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class FileSubstrate(Substrate):
    """
    One JSON text file per key inside a data directory.

    Each write goes to a temporary file that is fsynced and then renamed
    over the old one, so a crash mid-write leaves the previous value.
    """

    SUFFIX = ".json"

    def __init__(self, data_dir, quota_bytes=None):
        super().__init__(quota_bytes)
        self.data_dir = data_dir
        os.makedirs(self.data_dir, exist_ok=True)

    def _path(self, key):
        if not key or os.sep in key or key.startswith("."):
            raise SubstrateError(f"Invalid storage key: {key!r}")
        return os.path.join(self.data_dir, key + self.SUFFIX)

    def get(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SubstrateError(f"Could not read '{key}': {e}") from e

    def set(self, key, value):
        if not isinstance(value, str):
            raise SubstrateError(f"Value for '{key}' must be a string")
        self.check_quota(key, value)
        path = self._path(key)
        tmp_path = path + ".tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            logging.error(f"Error writing '{key}' to {self.data_dir}: {e}")
            raise SubstrateError(f"Could not write '{key}': {e}") from e

    def remove(self, key):
        path = self._path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise SubstrateError(f"Could not remove '{key}': {e}") from e

    def keys(self):
        return [
            name[: -len(self.SUFFIX)]
            for name in os.listdir(self.data_dir)
            if name.endswith(self.SUFFIX)
        ]
