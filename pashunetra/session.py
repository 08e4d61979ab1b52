"""
session.py

Identity provider interface used by the station, an in-process implementation
backed by werkzeug password hashes, and role gating for the portals.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from .errors import ProviderAuthFailure

log = logging.getLogger(__name__)

ROLES = ("farmer", "flw", "veterinarian", "admin")

# which roles may open which portal; identify/database/settings are open to all
PORTAL_ROLES = {
    "home": ROLES,
    "identify": ROLES,
    "database": ROLES,
    "settings": ROLES,
    "validation": ROLES,
    "dashboard": ("farmer", "flw", "admin"),
    "veterinary": ("veterinarian", "admin"),
    "analytics": ("flw", "veterinarian", "admin"),
}


@dataclass(frozen=True)
class User:
    uid: str
    display_name: str
    email: Optional[str]
    role: str
    region: str

    def to_dict(self):
        return asdict(self)


def can_access(user, portal):
    if user is None:
        return False
    return user.role in PORTAL_ROLES.get(portal, ())


def accessible_portals(user):
    return [p for p in PORTAL_ROLES if can_access(user, p)]


class SessionProvider(ABC):
    """The authentication/profile service. Every call may raise
    ProviderAuthFailure with a message fit to show on the form."""

    def __init__(self):
        self._callbacks = []
        self._current = None

    def current_user(self):
        return self._current

    def on_auth_change(self, callback):
        self._callbacks.append(callback)
        return lambda: self._callbacks.remove(callback)

    def _set_current(self, user):
        self._current = user
        for cb in list(self._callbacks):
            cb(user)

    @abstractmethod
    def login(self, email, password):
        raise NotImplementedError

    @abstractmethod
    def register_user(self, name, email, password, role, region):
        raise NotImplementedError

    @abstractmethod
    def update_profile(self, **changes):
        raise NotImplementedError

    def logout(self):
        if self._current is not None:
            log.info("user %s logged out", self._current.uid)
        self._set_current(None)


class InMemorySessionProvider(SessionProvider):
    def __init__(self, min_password=6):
        super().__init__()
        self.min_password = min_password
        self._users = {}
        self._hashes = {}
        self._lock = threading.Lock()

    def register_user(self, name, email, password, role, region):
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise ProviderAuthFailure("auth/invalid-email")
        if len(password or "") < self.min_password:
            raise ProviderAuthFailure("auth/weak-password")
        if role not in ROLES:
            raise ProviderAuthFailure(f"unknown role: {role}")
        with self._lock:
            if email in self._users:
                raise ProviderAuthFailure("auth/email-already-in-use")
            user = User(uuid.uuid4().hex, name or email, email, role, region or "Not specified")
            self._users[email] = user
            self._hashes[email] = generate_password_hash(password)
        log.info("registered %s as %s", user.uid, role)
        self._set_current(user)
        return user

    def login(self, email, password):
        email = (email or "").strip().lower()
        with self._lock:
            user = self._users.get(email)
            ok = user is not None and check_password_hash(self._hashes[email], password or "")
        if not ok:
            raise ProviderAuthFailure("auth/invalid-credential")
        log.info("user %s logged in", user.uid)
        self._set_current(user)
        return user

    def update_profile(self, **changes):
        user = self._current
        if user is None:
            raise ProviderAuthFailure("auth/no-current-user")
        allowed = {k: v for k, v in changes.items() if k in ("display_name", "region") and v}
        updated = replace(user, **allowed)
        with self._lock:
            self._users[user.email] = updated
        # a profile edit is not a sign-in change; listeners are not notified
        self._current = updated
        return updated
