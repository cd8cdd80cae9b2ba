# ecommerce_admin/auth/permission_cache.py
import threading
import time

from .gate import principal_grants


class PermissionCache:
    """
    Read-through cache of :class:`~ecommerce_admin.auth.gate.Grants` per user id.

    Owned by the application (``app.permission_cache``). Entries expire after
    ``ttl`` seconds; callers invalidate explicitly on logout and whenever a
    user's roles or permissions change, and clear everything when a role's
    permission set or a role/permission name changes.
    """

    def __init__(self, ttl=300, loader=principal_grants, clock=time.monotonic):
        self.ttl = ttl
        self._loader = loader
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get_grants(self, principal):
        key = principal.id
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry[1] > now:
            return entry[0]
        grants = self._loader(principal)
        with self._lock:
            self._entries[key] = (grants, now + self.ttl)
        return grants

    def invalidate(self, user_id):
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __contains__(self, user_id):
        with self._lock:
            return user_id in self._entries

    def __len__(self):
        with self._lock:
            return len(self._entries)
