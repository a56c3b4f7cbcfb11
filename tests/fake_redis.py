# In-memory stand-in for the handful of Redis string commands the task store uses.
import fnmatch


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.fail_with = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def ping(self):
        self._check()
        return True

    def get(self, key):
        self._check()
        return self.data.get(key)

    def set(self, key, value):
        self._check()
        self.data[key] = value
        return True

    def mget(self, keys):
        self._check()
        return [self.data.get(k) for k in keys]

    def scan_iter(self, match="*", count=None):
        self._check()
        return iter([k for k in list(self.data) if fnmatch.fnmatchcase(k, match)])
