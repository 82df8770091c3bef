from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from .persistence import Collection, build_backend
from .security import PasswordHasher, get_password_hasher
from .settings import Settings, get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
@dataclass
class StoreContext:
    """
    Everything a store needs, passed in explicitly instead of read from
    process-wide state: settings, the password hasher, a clock and the two
    collections.
    """

    settings: Settings
    hasher: PasswordHasher
    users: Collection
    tasks: Collection
    clock: Callable[[], datetime] = field(default=utcnow)

    def now_iso(self) -> str:
        return self.clock().isoformat()


# PUBLIC_INTERFACE
def build_context(settings: Optional[Settings] = None) -> StoreContext:
    """Build a StoreContext from settings (environment settings when omitted)."""
    settings = settings or get_settings()
    return StoreContext(
        settings=settings,
        hasher=get_password_hasher(settings.password_scheme),
        users=Collection(build_backend(settings, "users")),
        tasks=Collection(build_backend(settings, "tasks")),
    )
