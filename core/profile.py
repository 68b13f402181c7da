from datetime import datetime, timezone
from typing import Optional

from core.audit import AuditLog
from integrations.redis_cache import CacheService
from schemas.models import UserProfile


class InvalidCredentials(Exception):
    pass


class ProfileService:
    """
    The single signed-in farmer, stored as one JSON record under a fixed key.
    Login is a mock: it succeeds for the email of the stored profile.
    """

    def __init__(self, cache: CacheService, key: str = "user"):
        self.cache = cache
        self.key = key
        self.current: Optional[UserProfile] = None

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    def load(self) -> Optional[UserProfile]:
        data = self.cache.get_json(self.key)
        self.current = UserProfile.model_validate(data) if data else None
        return self.current

    def _save(self, profile: UserProfile) -> UserProfile:
        self.cache.set_json(self.key, profile.model_dump(mode="json"), ttl_seconds=None)
        self.current = profile
        return profile

    def register(self, **fields) -> UserProfile:
        profile = UserProfile(joined_at=datetime.now(timezone.utc), **fields)
        AuditLog.log_event(profile.id, "PROFILE_REGISTER", {"email": profile.email})
        return self._save(profile)

    def login(self, email: str) -> UserProfile:
        stored = self.load()
        if stored is None or stored.email.lower() != email.strip().lower():
            self.current = None
            raise InvalidCredentials("Invalid credentials")
        AuditLog.log_event(stored.id, "PROFILE_LOGIN", {})
        return stored

    def update(self, **changes) -> UserProfile:
        if self.current is None:
            raise InvalidCredentials("Not signed in")
        # Only the given keys change; an explicit None clears an optional field
        profile = UserProfile.model_validate({**self.current.model_dump(), **changes})
        return self._save(profile)

    def logout(self):
        if self.current is not None:
            AuditLog.log_event(self.current.id, "PROFILE_LOGOUT", {})
        self.current = None
        self.cache.delete(self.key)
